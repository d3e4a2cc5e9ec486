"""Central constants shared across the job engine, executors and API."""

from typing import Final

# Phase tags attached to log events.
PHASE_INIT: Final[str] = "INIT"
PHASE_DATA: Final[str] = "DATA"
PHASE_LOGIN: Final[str] = "LOGIN"
PHASE_AUTH: Final[str] = "AUTH"
PHASE_NET: Final[str] = "NET"
PHASE_SYS: Final[str] = "SYS"
PHASE_NAV: Final[str] = "NAV"
PHASE_WAIT: Final[str] = "WAIT"
PHASE_STOP: Final[str] = "STOP"
PHASE_DONE: Final[str] = "DONE"
PHASE_ERR: Final[str] = "ERR"
PHASE_FETCH: Final[str] = "FETCH"


def batch_phase(batch_number: int) -> str:
    """Phase tag for a batch, e.g. ``BATCH-3``."""
    return f"BATCH-{batch_number}"


# Record identifier column and the prefix used when it must be synthesized.
RECORD_ID_FIELD: Final[str] = "id"
SYNTHETIC_ID_PREFIX: Final[str] = "row-"

# Google Sheets CSV export.
SHEET_EXPORT_URL_TEMPLATE: Final[str] = (
    "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&gid={gid}"
)
DEFAULT_SHEET_GID: Final[str] = "0"

# Sample data served when a sheet cannot be downloaded directly.
DEMO_CSV_DATA: Final[str] = """Article ID,Name,Price,Category,Status
8345123,Running Shoes Ekiden,14.99,Running,Active
8552100,Tennis Racket TR100,24.99,Tennis,Active
8221001,Swimming Goggles,5.99,Water Sports,Pending
8100234,Hiking Backpack 20L,19.99,Hiking,Active
"""
