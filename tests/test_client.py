"""
Tests for input loading, output formatting and the command line
"""

import csv
import json
import os
import pytest
import threading
from unittest.mock import patch

from phasemr.client.cli import main
from phasemr.client.loader import load_work_items, read_work_item
from phasemr.client.output import format_counts, format_result, format_timings, write_result
from phasemr.common.errors import InputUnavailable
from phasemr.coordinator.metrics import PipelineMetrics


class TestLoader:

    def test_keys_by_base_name(self, sample_input_files):
        store = load_work_items(sample_input_files)
        assert set(store) == {"first.txt", "second.txt"}
        assert store["second.txt"] == "fox fox\nlazy\n"

    def test_every_line_ends_with_newline(self, temp_dir):
        path = os.path.join(temp_dir, 'no_newline.txt')
        with open(path, 'w') as f:
            f.write("a b\r\nc")
        assert read_work_item(path) == "a b\nc\n"

    def test_missing_file(self, temp_dir):
        with pytest.raises(InputUnavailable) as exc_info:
            load_work_items([os.path.join(temp_dir, 'missing.txt')])
        assert exc_info.value.reason == "file not found"

    def test_directory_is_not_a_work_item(self, temp_dir):
        with pytest.raises(InputUnavailable):
            read_work_item(temp_dir)

    def test_duplicate_base_names(self, temp_dir):
        paths = []
        for sub in ('one', 'two'):
            os.makedirs(os.path.join(temp_dir, sub))
            path = os.path.join(temp_dir, sub, 'same.txt')
            with open(path, 'w') as f:
                f.write("x")
            paths.append(path)
        with pytest.raises(InputUnavailable):
            load_work_items(paths)


class TestOutput:

    def test_format_counts(self):
        assert format_counts({"a.txt": 1, "b.txt": 2}) == "{a.txt=1, b.txt=2}"

    def test_format_result_sorted(self):
        lines = format_result({"dog": {"a.txt": 1}, "cat": {"a.txt": 2}}, sort=True)
        assert lines == ["'cat' => {a.txt=2}", "'dog' => {a.txt=1}"]

    def test_write_result(self, temp_dir):
        path = os.path.join(temp_dir, 'results.txt')
        write_result({"cat": {"a.txt": 2}}, path)
        with open(path) as f:
            assert f.read() == "'cat' => {a.txt=2}\n"

    def test_format_timings(self):
        metrics = PipelineMetrics(pool_size=3, reduce_pool_size=None, group_strategy="sequential",
                                  map_elapsed_ms=10, group_elapsed_ms=12, reduce_elapsed_ms=30)
        lines = format_timings(metrics, load_time_ms=5)
        assert lines[0] == "Time to load files: 5ms"
        assert "with 3 threads: 10ms" in lines[1]
        assert lines[-1].endswith("30ms")


class TestCli:

    def test_run_prints_results(self, sample_input_files, capsys):
        assert main(["run", "2", *sample_input_files, "--sort"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert "'fox' => {first.txt=2, second.txt=2}" in out

    def test_run_writes_output_and_metrics(self, sample_input_files, temp_dir):
        output = os.path.join(temp_dir, 'out.txt')
        metrics = os.path.join(temp_dir, 'metrics.json')
        code = main(["run", "3", *sample_input_files, "-o", output, "--metrics", metrics,
                     "--group-strategy", "parallel", "--reduce-pool-size", "2"])

        assert code == 0
        with open(output) as f:
            assert any(line.startswith("'lazy' => ") for line in f)
        with open(metrics) as f:
            data = json.load(f)
        assert data['pool_size'] == 3
        assert data['group_strategy'] == "parallel"

    def test_missing_input_exits_with_error(self, temp_dir):
        assert main(["run", "2", os.path.join(temp_dir, 'nope.txt')]) == 1

    def test_pool_size_must_be_positive(self, sample_input_files):
        with pytest.raises(SystemExit):
            main(["run", "0", *sample_input_files])

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1

    def test_benchmark_writes_csv(self, sample_input_files, temp_dir):
        path = os.path.join(temp_dir, 'bench.csv')
        code = main(["benchmark", *sample_input_files, "--pool-sizes", "1", "2",
                     "--runs", "2", "--csv", path])

        assert code == 0
        with open(path, newline='') as f:
            rows = list(csv.DictReader(f))
        assert [(r['pool_size'], r['run']) for r in rows] == [("1", "0"), ("1", "1"), ("2", "0"), ("2", "1")]

    def test_thread_start_failure_exits_with_error(self, sample_input_files):
        real_start = threading.Thread.start

        def refuse_reduce_threads(thread):
            if thread.name.startswith("reduce-"):
                raise RuntimeError("can't start new thread")
            return real_start(thread)

        with patch.object(threading.Thread, 'start', refuse_reduce_threads):
            assert main(["run", "2", *sample_input_files]) == 1
