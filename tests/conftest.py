"""
Pytest configuration and shared fixtures
"""

import pytest
import os
import tempfile
import shutil


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def sample_text():
    """Sample text for testing"""
    return """The quick brown fox jumps over the lazy dog.
The dog was really lazy.
The fox was very quick and brown.
Quick brown foxes are amazing animals.
Lazy dogs sleep all day."""


@pytest.fixture
def scenario_store():
    """Two small work items with known counts"""
    return {"a.txt": "cat dog cat", "b.txt": "dog dog"}


@pytest.fixture
def large_store(sample_text):
    """Many work items sharing a vocabulary, enough to keep every thread busy"""
    return {f"doc-{i}.txt": sample_text * (1 + i % 3) for i in range(40)}


@pytest.fixture
def sample_input_files(temp_dir, sample_text):
    """Write two input files and return their paths"""
    first = os.path.join(temp_dir, 'first.txt')
    second = os.path.join(temp_dir, 'second.txt')
    with open(first, 'w') as f:
        f.write(sample_text)
    with open(second, 'w') as f:
        f.write("fox fox\nlazy\n")
    return [first, second]
