"""Domain value types for the records being uploaded."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from autorank.core.constants import RECORD_ID_FIELD

FieldValue = str | int | float


@dataclass(frozen=True)
class Record:
    """One catalog row: an ordered, read-only mapping of column name to value."""

    id: str
    fields: Mapping[str, FieldValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze a private copy so callers cannot mutate the record through their dict.
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __getitem__(self, key: str) -> FieldValue:
        if key == RECORD_ID_FIELD:
            return self.id
        return self.fields[key]

    def to_dict(self) -> dict[str, FieldValue]:
        """Plain dict with every column plus the identifier."""
        return {**self.fields, RECORD_ID_FIELD: self.id}


@dataclass(frozen=True)
class Batch:
    """Contiguous, non-empty slice of the record sequence uploaded in one go."""

    index: int  # 0-based position in the batch sequence
    records: tuple[Record, ...]

    @property
    def number(self) -> int:
        """1-based identifier used in log messages and upload file names."""
        return self.index + 1

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)
