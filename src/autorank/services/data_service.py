"""Loading and previewing the tabular data a job will upload."""

from dataclasses import dataclass, field

from autorank.config import Settings
from autorank.core.constants import DEMO_CSV_DATA
from autorank.core.exceptions import DataSourceError
from autorank.core.logging import get_logger
from autorank.core.models import Record
from autorank.data.batching import count_batches
from autorank.data.records import column_names, parse_records
from autorank.data.sheets import fetch_sheet_csv, parse_google_sheet_url

logger = get_logger(__name__)


@dataclass(frozen=True)
class DataPreview:
    """Parsed view of raw CSV text."""

    records: list[Record]
    columns: list[str]
    batches_total: int


@dataclass(frozen=True)
class SheetData:
    """CSV text obtained for a sheet URL."""

    csv_text: str
    export_url: str | None = None
    from_fallback: bool = False
    warnings: list[str] = field(default_factory=list)


class DataService:
    """Turns pasted text or a sheet URL into records."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def preview(self, csv_text: str, batch_size: int | None = None) -> DataPreview:
        """Parse CSV text and compute how it would be batched.

        Raises:
            InvalidConfiguration: If ``batch_size`` is not positive.
        """
        size = batch_size if batch_size is not None else self.settings.default_batch_size
        records = parse_records(csv_text)
        return DataPreview(
            records=records,
            columns=column_names(records),
            batches_total=count_batches(len(records), size),
        )

    async def load_sheet(self, url: str) -> SheetData:
        """Download a sheet as CSV, falling back to demo data when allowed.

        Raises:
            DataSourceError: If the URL is invalid, or the download fails and
                the demo fallback is disabled.
        """
        if parse_google_sheet_url(url) is None:
            raise DataSourceError("Invalid Google Sheet URL format.")

        try:
            csv_text, export_url = await fetch_sheet_csv(
                url, timeout_seconds=self.settings.sheet_fetch_timeout_seconds
            )
        except DataSourceError as e:
            if not self.settings.sheet_fallback_to_demo:
                raise
            logger.warning(f"Sheet fetch failed, serving demo data: {e.message}")
            return SheetData(
                csv_text=DEMO_CSV_DATA,
                from_fallback=True,
                warnings=[
                    f"Could not fetch sheet directly ({e.message}). "
                    "Loaded demo data for testing purposes."
                ],
            )

        return SheetData(csv_text=csv_text, export_url=export_url)
