"""Unit tests for indexed access.

WHY: Index directives are easy to misconfigure (index on a scalar, list
shorter than expected). Those cases must degrade without failing the
extraction, and the in-range case must pick exactly the right element.

HOW: get_by_index() is called directly with lists, tuples, empty
sequences, text, and non-sequences; caplog checks the diagnostics.
"""

import logging

from action_context.core.indexer import get_by_index, is_indexable


class TestInRange:
    """An index inside the sequence returns that element."""

    def test_list(self):
        assert get_by_index("field", "items", ["a", "b", "c"], 1) == "b"

    def test_first_and_last(self):
        assert get_by_index("field", "items", ["a", "b", "c"], 0) == "a"
        assert get_by_index("field", "items", ["a", "b", "c"], 2) == "c"

    def test_tuple(self):
        assert get_by_index("param", "pair", (10, 20), 1) == 20

    def test_none_element_is_returned_as_none(self):
        assert get_by_index("field", "items", [None, "b"], 0) is None


class TestOutOfRange:
    """Empty or short sequences yield None without raising."""

    def test_empty_sequence(self):
        assert get_by_index("field", "items", [], 0) is None

    def test_index_equal_to_size(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="action_context.core.indexer"):
            assert get_by_index("field", "items", ["a", "b", "c"], 3) is None
        assert "out of bounds" in caplog.text
        assert "'items'" in caplog.text

    def test_index_past_size(self):
        assert get_by_index("field", "items", ["a", "b", "c"], 5) is None


class TestNotASequence:
    """Non-sequences pass through unchanged with a warning."""

    def test_scalar_passes_through(self, caplog):
        with caplog.at_level(logging.WARNING, logger="action_context.core.indexer"):
            assert get_by_index("field", "amount", 42, 0) == 42
        assert "not a sequence" in caplog.text

    def test_text_is_not_indexed(self):
        assert get_by_index("field", "name", "order-7", 1) == "order-7"

    def test_mapping_passes_through(self):
        value = {"a": 1}
        assert get_by_index("param", "options", value, 0) is value

    def test_set_passes_through(self):
        value = {1, 2}
        assert get_by_index("param", "ids", value, 0) is value


class TestIsIndexable:
    """is_indexable accepts sequences except text and bytes."""

    def test_sequences(self):
        assert is_indexable([1])
        assert is_indexable((1,))
        assert is_indexable(range(3))

    def test_text_and_bytes(self):
        assert not is_indexable("abc")
        assert not is_indexable(b"abc")
        assert not is_indexable(bytearray(b"abc"))
