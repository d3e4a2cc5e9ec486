"""Data preview and sheet fetch schemas."""

from typing import Any

from pydantic import BaseModel, Field


class PreviewRequest(BaseModel):
    """Request model for the data preview endpoint."""

    csv_text: str = Field(..., description="Raw CSV data, header row first")
    batch_size: int | None = Field(None, description="Records per batch", gt=0)
    limit: int = Field(20, description="Maximum number of rows returned", ge=0, le=500)


class PreviewResponse(BaseModel):
    """Parsed records and batching for pasted data."""

    total_records: int = Field(..., description="Number of valid rows")
    batches_total: int = Field(..., description="Number of batches the job would run")
    columns: list[str] = Field(..., description="Column names from the header")
    rows: list[dict[str, Any]] = Field(..., description="First rows, identifier included")
    template_url: str = Field(..., description="Spreadsheet template the portal expects")


class SheetRequest(BaseModel):
    """Request model for fetching a Google Sheet."""

    url: str = Field(..., description="Sharing URL of the sheet", min_length=1)


class SheetResponse(BaseModel):
    """Sheet content as CSV text."""

    csv_text: str = Field(..., description="CSV export of the sheet tab")
    export_url: str | None = Field(None, description="URL the CSV was downloaded from")
    from_fallback: bool = Field(False, description="Demo data served instead of the sheet")
    warnings: list[str] = Field(default_factory=list)
