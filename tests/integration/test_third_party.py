"""
Describe tests for values from third-party array libraries
"""

import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from object_describe import describe, serialize
from object_describe.classify import classify, is_array_like, is_iterable

# Integration Tests ----------------------------------------------------------------------------------------------------

pytestmark = pytest.mark.integration

# Optional imports -----------------------------------------------------------------------------------------------------

np = pytest.importorskip("numpy")


class TestNumpyIntegration:
    """Integration tests for NumPy arrays and scalars."""

    def test_classify_array(self):
        """Arrays are iterable, array-like composites named after their class."""
        arr = np.arange(3)
        assert classify(arr) == "ndarray"
        assert is_iterable(arr)
        assert is_array_like(arr)

    def test_describe_array(self):
        """Array elements are sampled as numbers."""
        d = describe(np.arange(3))
        assert d.kind == "ndarray"
        assert d.is_iterable is True
        items = d.iterable_sample.buckets[0].items
        assert [item.kind for item in items] == ["number"] * 3
        assert [item.value for item in items] == ["0", "1", "2"]
        assert d.prototype_description.kind == "ndarray"

    def test_describe_large_array_truncated(self):
        """Only the first max_total elements are sampled."""
        d = describe(np.zeros(1000))
        assert d.iterable_sample.truncated is True
        assert len(d.iterable_sample) == 50

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            pytest.param(np.float64(1.5), "1.5", id="float64"),
            pytest.param(np.bool_(True), "True", id="bool_"),
        ],
    )
    @pytest.mark.usefixtures("c_locale")
    def test_serialize_scalars(self, value, expected):
        """NumPy scalars serialize like the builtin values they mirror."""
        assert serialize(value) == expected
