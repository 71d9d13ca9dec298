"""
Unit tests for MapExecutor
"""

import pytest
from unittest.mock import Mock

from phasemr.common.errors import TaskFailure
from phasemr.common.types import MappedItem, PhaseName
from phasemr.coordinator.aggregation import MappedItemCollector
from phasemr.worker.map_executor import MapExecutor, tokenize


class TestTokenize:
    """Tests for whitespace tokenization"""

    def test_splits_on_runs_of_whitespace(self):
        assert tokenize("cat  dog\tcat\n\ndog") == ["cat", "dog", "cat", "dog"]

    def test_empty_content_yields_nothing(self):
        assert tokenize("") == []

    def test_whitespace_only_content_yields_nothing(self):
        assert tokenize("  \n\t \n") == []

    def test_punctuation_and_case_are_kept(self):
        """Tokens are raw non-whitespace runs, no normalization"""
        assert tokenize("The dog. the DOG") == ["The", "dog.", "the", "DOG"]


class TestMapExecutor:
    """Tests for map task execution"""

    def test_delivers_items_in_token_order(self):
        collector = MappedItemCollector()
        executor = MapExecutor(0, "a.txt", "cat dog cat", collector)

        count = executor.execute()

        assert count == 3
        assert collector.snapshot() == (
            MappedItem("cat", "a.txt"),
            MappedItem("dog", "a.txt"),
            MappedItem("cat", "a.txt"),
        )

    def test_empty_content_still_delivers_once(self):
        collector = MappedItemCollector()
        assert MapExecutor(0, "x.txt", "", collector).execute() == 0
        assert len(collector) == 0
        assert collector.deliveries == 1

    def test_failure_is_wrapped_in_task_failure(self):
        collector = Mock()
        collector.deliver.side_effect = RuntimeError("boom")

        with pytest.raises(TaskFailure) as exc_info:
            MapExecutor(7, "a.txt", "cat", collector).execute()

        assert exc_info.value.phase is PhaseName.MAP
        assert exc_info.value.task_id == 7
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_mapped_item_string_form(self):
        assert str(MappedItem("cat", "a.txt")) == '["cat","a.txt"]'
