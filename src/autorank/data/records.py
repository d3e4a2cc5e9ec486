"""Record set builder: raw CSV text to ordered, typed records."""

import csv
import io
import re

from autorank.core.constants import RECORD_ID_FIELD, SYNTHETIC_ID_PREFIX
from autorank.core.logging import get_logger
from autorank.core.models import FieldValue, Record

logger = get_logger(__name__)

# Regex patterns compiled once for efficiency
_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def coerce_value(raw: str) -> FieldValue:
    """Trim a cell and convert it to a number when it looks like one.

    Args:
        raw: Cell text as read from the CSV.

    Returns:
        ``int`` or ``float`` for numeric cells, the trimmed string otherwise.
    """
    value = raw.strip()
    if _INT_PATTERN.match(value):
        return int(value)
    if _FLOAT_PATTERN.match(value):
        return float(value)
    return value


def parse_records(text: str) -> list[Record]:
    """Parse CSV text (header row first) into records.

    Rows whose field count differs from the header are dropped silently. When
    the header has no ``id`` column, or a row leaves it empty, the identifier is
    synthesized from the row position (``row-1`` for the first data row).

    Args:
        text: Raw CSV text, e.g. pasted by the operator or a sheet export.

    Returns:
        list[Record]: Records in input order. Empty when there is no data row.
    """
    reader = csv.reader(io.StringIO(text.strip()))
    rows = list(reader)
    if len(rows) < 2:
        return []

    headers = [h.strip() for h in rows[0]]
    records: list[Record] = []
    dropped = 0

    for line_index, row in enumerate(rows[1:], start=1):
        if len(row) != len(headers):
            dropped += 1
            continue

        fields = {header: coerce_value(cell) for header, cell in zip(headers, row)}
        raw_id = fields.get(RECORD_ID_FIELD, "")
        record_id = str(raw_id) if raw_id != "" else f"{SYNTHETIC_ID_PREFIX}{line_index}"
        records.append(Record(id=record_id, fields=fields))

    if dropped:
        logger.debug(f"Dropped {dropped} malformed row(s) out of {len(rows) - 1}")
    logger.debug(f"Parsed {len(records)} record(s) with columns {headers}")
    return records


def column_names(records: list[Record]) -> list[str]:
    """Column names of the first record, in header order."""
    if not records:
        return []
    return list(records[0].fields.keys())
