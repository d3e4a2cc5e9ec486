"""Fixed-size, order-preserving batching of records."""

import math
from collections.abc import Sequence

from autorank.core.exceptions import InvalidConfiguration
from autorank.core.models import Batch, Record


def count_batches(record_count: int, size: int) -> int:
    """Number of batches ``split_batches`` would produce."""
    if size <= 0:
        raise InvalidConfiguration(f"Batch size must be a positive integer, got {size}")
    return math.ceil(record_count / size)


def split_batches(records: Sequence[Record], size: int) -> list[Batch]:
    """Split records into consecutive batches of at most ``size`` records.

    Only the last batch may be shorter. An empty input yields no batches.

    Raises:
        InvalidConfiguration: If ``size`` is not positive.
    """
    count_batches(len(records), size)
    return [
        Batch(index=index, records=tuple(records[start : start + size]))
        for index, start in enumerate(range(0, len(records), size))
    ]
