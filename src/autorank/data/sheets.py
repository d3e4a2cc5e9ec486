"""Google Sheet URL helpers and CSV export download."""

import re
from typing import NamedTuple

import aiohttp

from autorank.core.constants import DEFAULT_SHEET_GID, SHEET_EXPORT_URL_TEMPLATE
from autorank.core.exceptions import DataSourceError
from autorank.core.logging import get_logger

logger = get_logger(__name__)

_SHEET_ID_PATTERN = re.compile(r"/d/([a-zA-Z0-9_-]+)")
_GID_PATTERN = re.compile(r"[#&?]gid=([0-9]+)")


class SheetRef(NamedTuple):
    """Spreadsheet id and tab (gid) extracted from a sharing URL."""

    id: str
    gid: str


def parse_google_sheet_url(url: str) -> SheetRef | None:
    """Extract the sheet id and gid from a standard Google Sheet URL.

    Args:
        url: Browser URL of the sheet, e.g. ``.../spreadsheets/d/<id>/edit#gid=0``.

    Returns:
        SheetRef | None: The reference, or None if no sheet id is present.
    """
    id_match = _SHEET_ID_PATTERN.search(url)
    if not id_match:
        return None

    gid_match = _GID_PATTERN.search(url)
    gid = gid_match.group(1) if gid_match else DEFAULT_SHEET_GID
    return SheetRef(id=id_match.group(1), gid=gid)


def construct_csv_export_url(sheet_id: str, gid: str) -> str:
    """Build the CSV export URL for one tab of a sheet."""
    return SHEET_EXPORT_URL_TEMPLATE.format(sheet_id=sheet_id, gid=gid)


async def fetch_sheet_csv(
    url: str,
    timeout_seconds: float = 30,
    session: aiohttp.ClientSession | None = None,
) -> tuple[str, str]:
    """Download a sheet tab as CSV text.

    Args:
        url: Sharing URL of the sheet.
        timeout_seconds: Total request timeout.
        session: Optional session to reuse; a private one is created otherwise.

    Returns:
        tuple[str, str]: (csv_text, export_url).

    Raises:
        DataSourceError: If the URL is not a sheet URL or the download fails.
    """
    ref = parse_google_sheet_url(url)
    if ref is None:
        raise DataSourceError("Invalid Google Sheet URL format.")

    export_url = construct_csv_export_url(ref.id, ref.gid)
    logger.info(f"Downloading sheet CSV from {export_url}")

    owns_session = session is None
    client = session or aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout_seconds)
    )
    try:
        async with client.get(export_url) as response:
            if response.status != 200:
                raise DataSourceError(f"Sheet download failed: HTTP {response.status}")
            text = await response.text()
    except aiohttp.ClientError as e:
        raise DataSourceError(f"Sheet download failed: {e}") from e
    except TimeoutError as e:
        raise DataSourceError("Sheet download timed out") from e
    finally:
        if owns_session:
            await client.close()

    logger.info(f"Fetched {len(text)} characters of sheet data")
    return text, export_url
