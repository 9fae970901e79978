"""
Тесты кэша минимумов и поэлементного слияния.
"""

import numpy as np
import pytest

from dpmeans.core.cache import MIN_ENTRY_DTYPE, new_cache, pairwise_mins
from dpmeans.core.exceptions import DimensionMismatch


class TestPairwiseMins:
    def test_candidate_wins_where_smaller(self):
        entries = new_cache(np.array([1.0, 5.0, 3.0]), np.array([0, 0, 1]))
        out = pairwise_mins(entries, np.array([2.0, 4.0, 0.5]), owner=7)

        np.testing.assert_array_equal(out["value"], [1.0, 4.0, 0.5])
        np.testing.assert_array_equal(out["owner"], [0, 7, 7])
        # без out исходный кэш не меняется
        np.testing.assert_array_equal(entries["value"], [1.0, 5.0, 3.0])

    def test_ties_keep_first(self):
        entries = new_cache(np.array([2.0, 2.0]), np.array([3, 4]))
        out = pairwise_mins(entries, np.array([2.0, 2.0]), owner=9)

        np.testing.assert_array_equal(out["owner"], [3, 4])

    def test_in_place_suffix_updates_cache(self):
        cache = new_cache(np.array([1.0, 1.0, 1.0, 1.0]), np.zeros(4, dtype=np.int64))
        suffix = cache[2:]
        result = pairwise_mins(suffix, np.array([0.0, 2.0]), owner=1, out=suffix)

        assert np.shares_memory(result, cache)
        np.testing.assert_array_equal(cache["value"], [1.0, 1.0, 0.0, 1.0])
        np.testing.assert_array_equal(cache["owner"], [0, 0, 1, 0])

    def test_separate_out_buffer(self):
        entries = new_cache(np.array([1.0, 3.0]), np.array([0, 0]))
        out = np.empty(2, dtype=MIN_ENTRY_DTYPE)
        pairwise_mins(entries, np.array([2.0, 2.0]), owner=1, out=out)

        np.testing.assert_array_equal(out["value"], [1.0, 2.0])
        np.testing.assert_array_equal(out["owner"], [0, 1])
        np.testing.assert_array_equal(entries["value"], [1.0, 3.0])

    def test_length_mismatch(self):
        entries = new_cache(np.zeros(3), np.zeros(3, dtype=np.int64))
        with pytest.raises(DimensionMismatch):
            pairwise_mins(entries, np.zeros(2), owner=1)

    def test_new_cache_shape_mismatch(self):
        with pytest.raises(DimensionMismatch):
            new_cache(np.zeros(3), np.zeros(2, dtype=np.int64))
