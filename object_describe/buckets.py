"""
Bounded sampling of iterables into fixed-size buckets.

Only a prefix of the iterable is ever consumed, so infinite generators and
lazy sequences are safe to sample.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass
from itertools import islice
from typing import Any, Callable, Iterable

# Local ----------------------------------------------------------------------------------------------------------------
from .classify import is_iterable
from .formatters import fmt_type, fmt_value
from .meta import MetaMixin


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Bucket(MetaMixin):
    """A consecutive run of sampled items.

    Attributes:
        lower_bound: Zero-based index of the first item, relative to the original iterable.
        upper_bound: Zero-based, inclusive index of the last item.
        items: The sampled items, or their descriptions.
    """
    lower_bound: int
    upper_bound: int
    items: tuple = ()

    def __post_init__(self) -> None:
        """Validate bounds."""
        for name in ("lower_bound", "upper_bound"):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, int):
                raise TypeError(f"Bucket.{name} must be an int, got {fmt_type(val)}")
            if val < 0:
                raise ValueError(f"Bucket.{name} must be >=0, but got {fmt_value(val)}")
        if self.upper_bound < self.lower_bound:
            raise ValueError("Bucket.lower_bound <= Bucket.upper_bound expected")


@dataclass(frozen=True)
class BucketedSample(MetaMixin):
    """Sampled prefix of an iterable.

    Attributes:
        buckets: Consecutive buckets, each holding at most bucket_size items.
        truncated: Whether the iterable had more items than were sampled.
    """
    buckets: tuple[Bucket, ...] = ()
    truncated: bool = False

    def __len__(self) -> int:
        return sum(len(bucket.items) for bucket in self.buckets)

    def map(self, fn: Callable[[Any], Any]) -> "BucketedSample":
        """Return a sample with the same bounds and every item replaced by fn(item)."""
        return BucketedSample(
            buckets=tuple(
                Bucket(bucket.lower_bound, bucket.upper_bound, tuple(fn(item) for item in bucket.items))
                for bucket in self.buckets
            ),
            truncated=self.truncated,
        )


# Methods --------------------------------------------------------------------------------------------------------------

def sample(iterable: Iterable, bucket_size: int = 10, max_total: int = 50) -> BucketedSample:
    """
    Group the first max_total items of an iterable into buckets of bucket_size.

    At most max_total + 1 items are pulled: the extra item tells an iterable that ends
    at exactly max_total apart from a longer one. One-shot iterators and generators
    are consumed by sampling.

    Args:
        iterable: Any non-string iterable.
        bucket_size: Maximum number of items per bucket.
        max_total: Maximum number of items across all buckets.

    Returns:
        BucketedSample whose last bucket may be smaller than bucket_size.

    Raises:
        TypeError: If iterable is not iterable (strings included), or bucket_size
            is not a positive int, or max_total is not an int.
        ValueError: If max_total is negative.

    Examples:
        >>> s = sample(range(25))
        >>> [(b.lower_bound, b.upper_bound) for b in s.buckets]
        [(0, 9), (10, 19), (20, 24)]
        >>> s.truncated
        False
    """
    if not is_iterable(iterable):
        raise TypeError(f"iterable must be a non-string iterable, but got {fmt_type(iterable)}")
    if isinstance(bucket_size, bool) or not isinstance(bucket_size, int) or bucket_size < 1:
        raise TypeError(f"bucket_size must be a positive int, but got {fmt_value(bucket_size)}")
    if isinstance(max_total, bool) or not isinstance(max_total, int):
        raise TypeError(f"max_total must be an int, got {fmt_type(max_total)}")
    if max_total < 0:
        raise ValueError(f"max_total must be >=0, but got {fmt_value(max_total)}")

    items = list(islice(iter(iterable), max_total + 1))
    truncated = len(items) > max_total
    items = items[:max_total]

    buckets = tuple(
        Bucket(
            lower_bound=start,
            upper_bound=min(start + bucket_size, len(items)) - 1,
            items=tuple(items[start:start + bucket_size]),
        )
        for start in range(0, len(items), bucket_size)
    )
    return BucketedSample(buckets=buckets, truncated=truncated)
