"""
End-to-end tests running the command line in a subprocess
"""

import os
import sys
import subprocess
import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def run_cli(*args):
    env = dict(os.environ)
    env['PYTHONPATH'] = ROOT + os.pathsep + env.get('PYTHONPATH', '')
    return subprocess.run(
        [sys.executable, '-m', 'phasemr.client.cli', *args],
        capture_output=True, text=True, cwd=ROOT, env=env, timeout=120
    )


@pytest.mark.integration
class TestWordCountEndToEnd:
    """Runs the shipped sample inputs through the CLI"""

    def test_sample_inputs(self, temp_dir):
        output = os.path.join(temp_dir, 'results.txt')
        result = run_cli('run', '2', 'examples/inputs/a.txt', 'examples/inputs/b.txt',
                         '--output', output, '--sort')

        assert result.returncode == 0, result.stderr
        assert "Total time taken to reduce" in result.stderr
        with open(output) as f:
            lines = f.read().splitlines()
        assert lines == ["'cat' => {a.txt=2}", "'dog' => {a.txt=1, b.txt=2}"]

    def test_pool_sizes_agree(self, temp_dir):
        outputs = []
        for pool_size in ('1', '8'):
            path = os.path.join(temp_dir, f'results-{pool_size}.txt')
            result = run_cli('run', pool_size, 'examples/inputs/a.txt', 'examples/inputs/b.txt',
                             'examples/inputs/story.txt', '--output', path, '--sort')
            assert result.returncode == 0, result.stderr
            with open(path) as f:
                outputs.append(set(f.read().splitlines()))
        assert outputs[0] == outputs[1]

    def test_missing_file_fails(self):
        result = run_cli('run', '2', 'examples/inputs/missing.txt')
        assert result.returncode == 1
        assert "Input unavailable" in result.stderr
