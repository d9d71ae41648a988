"""
Unit tests for entry ID set algebra.
"""

import numpy as np
import pytest

from bgcdb.utils import difference, intersect, union


class TestUnion:
    """Test union."""

    def test_sorted(self):
        assert union([535], [1070]) == [535, 1070]
        assert union([1070], [535]) == [535, 1070]

    def test_deduplicated(self):
        assert union([3, 1, 3], [2, 1]) == [1, 2, 3]

    def test_empty(self):
        assert union([], []) == []
        assert union([], [5, 4]) == [4, 5]

    def test_python_ints(self):
        result = union(np.array([2, 1]), [3])
        assert result == [1, 2, 3]
        assert all(type(i) is int for i in result)


class TestIntersect:
    """Test intersection."""

    def test_follows_second_order(self):
        assert intersect([1, 2, 3], [3, 9, 2]) == [3, 2]

    def test_deduplicated(self):
        assert intersect([1, 1, 2], [2, 2, 1, 1]) == [2, 1]

    def test_disjoint(self):
        assert intersect([535], [1070]) == []

    @pytest.mark.parametrize("a, b", [([], []), ([], [1]), ([1], [])])
    def test_empty(self, a, b):
        assert intersect(a, b) == []


class TestDifference:
    """Test difference."""

    def test_follows_first_order(self):
        assert difference([5, 1, 4, 2], [4]) == [5, 1, 2]

    def test_deduplicated(self):
        assert difference([5, 1, 5, 2, 1], [2]) == [5, 1]

    def test_remove_all(self):
        assert difference([1, 2], [2, 1, 7]) == []

    def test_empty(self):
        assert difference([], []) == []
        assert difference([], [1]) == []
        assert difference([3, 3], []) == [3]
