"""
Text rendering of pipeline results and timings
"""

from typing import Iterable, List

from phasemr.common.types import FinalResult, ReducedCounts


def format_counts(counts: ReducedCounts, sort: bool = False) -> str:
    """Render one token's count table as {key1=count1, key2=count2}"""
    keys: Iterable[str] = sorted(counts) if sort else counts
    return '{' + ', '.join(f"{key}={counts[key]}" for key in keys) + '}'


def format_result(result: FinalResult, sort: bool = False) -> List[str]:
    """
    One line per token: '<token>' => {<key>=<count>, ...}

    Without sort, tokens and keys come out in whatever order the run
    produced them.
    """
    tokens: Iterable[str] = sorted(result) if sort else result
    return [f"'{token}' => {format_counts(result[token], sort=sort)}" for token in tokens]


def write_result(result: FinalResult, path: str, sort: bool = False):
    """Write the formatted result to a file"""
    with open(path, 'w', encoding='utf-8') as f:
        for line in format_result(result, sort=sort):
            f.write(line + '\n')


def format_timings(metrics, load_time_ms: float = None) -> List[str]:
    """Phase timing summary, elapsed from pipeline start"""
    lines = []
    if load_time_ms is not None:
        lines.append(f"Time to load files: {load_time_ms:.0f}ms")
    lines.append(f"Total time taken to map with {metrics.pool_size} threads: {metrics.map_elapsed_ms:.0f}ms")
    lines.append(f"Total time taken to group ({metrics.group_strategy}): {metrics.group_elapsed_ms:.0f}ms")
    lines.append(f"Total time taken to reduce: {metrics.reduce_elapsed_ms:.0f}ms")
    return lines
