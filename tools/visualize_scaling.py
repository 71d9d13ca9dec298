#!/usr/bin/env python3
"""
Plot pipeline phase times against pool size from a benchmark CSV.
"""

import csv
import sys
from collections import defaultdict
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

PHASES = ['map_phase_ms', 'group_phase_ms', 'reduce_phase_ms']


def load_rows(csv_file):
    """Load benchmark rows written by `phasemr benchmark`."""
    with open(csv_file, 'r', newline='') as f:
        return list(csv.DictReader(f))


def aggregate_runs(rows):
    """
    Aggregate repeated runs of the same pool size.
    Returns dict: pool_size -> {phase: (mean, std), 'total': (mean, std), 'num_runs': n}
    """
    by_pool = defaultdict(list)
    for row in rows:
        by_pool[int(row['pool_size'])].append(row)

    aggregated = {}
    for pool_size, runs in sorted(by_pool.items()):
        stats = {'num_runs': len(runs)}
        for column in PHASES + ['total_time_ms']:
            values = np.array([float(r[column]) for r in runs])
            stats[column] = (float(np.mean(values)), float(np.std(values)))
        aggregated[pool_size] = stats
    return aggregated


def plot_phase_scaling(aggregated, output_file):
    """Stacked bars of mean phase time per pool size, with total-time error bars."""
    pool_sizes = list(aggregated)
    x = np.arange(len(pool_sizes))
    colors = ['#FFE66D', '#4ECDC4', '#95E1D3']

    fig, ax = plt.subplots(figsize=(10, 6))
    bottom = np.zeros(len(pool_sizes))
    for phase, color in zip(PHASES, colors):
        means = np.array([aggregated[p][phase][0] for p in pool_sizes])
        ax.bar(x, means, bottom=bottom, color=color, label=phase.replace('_ms', '').replace('_', ' '))
        bottom += means

    totals = [aggregated[p]['total_time_ms'] for p in pool_sizes]
    ax.errorbar(x, [t[0] for t in totals], yerr=[t[1] for t in totals],
                fmt='none', ecolor='black', capsize=4)

    ax.set_xticks(x)
    ax.set_xticklabels([str(p) for p in pool_sizes])
    ax.set_xlabel('Pool size (threads)')
    ax.set_ylabel('Time (ms)')
    ax.set_title('Pipeline Phase Time vs Pool Size')
    ax.legend()
    ax.grid(axis='y', alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_file, dpi=150)
    plt.close(fig)
    print(f"Saved plot to {output_file}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python tools/visualize_scaling.py <benchmark.csv> [output.png]")
        sys.exit(1)

    output_file = sys.argv[2] if len(sys.argv) > 2 else 'phase_scaling.png'
    aggregated = aggregate_runs(load_rows(sys.argv[1]))
    if not aggregated:
        print("No benchmark rows found")
        sys.exit(1)
    plot_phase_scaling(aggregated, output_file)


if __name__ == '__main__':
    main()
