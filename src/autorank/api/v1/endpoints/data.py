"""Data source endpoints: preview pasted CSV and fetch Google Sheets."""

from fastapi import APIRouter

from autorank.dependencies import DataServiceDep
from autorank.schemas.data import PreviewRequest, PreviewResponse, SheetRequest, SheetResponse

router = APIRouter(prefix="/data", tags=["data"])


@router.post(
    "/preview",
    response_model=PreviewResponse,
    summary="Preview Data",
    description="Parses CSV text and reports how it would be split into batches",
)
async def preview_data(request: PreviewRequest, data_service: DataServiceDep) -> PreviewResponse:
    """Parse pasted CSV data.

    Args:
        request: CSV text, batch size and row limit.
        data_service: Injected data service.

    Returns:
        PreviewResponse: Record count, batch count, columns and the first rows.
    """
    preview = data_service.preview(request.csv_text, request.batch_size)
    return PreviewResponse(
        total_records=len(preview.records),
        batches_total=preview.batches_total,
        columns=preview.columns,
        rows=[record.to_dict() for record in preview.records[: request.limit]],
        template_url=data_service.settings.portal_template_url,
    )


@router.post("/sheet", response_model=SheetResponse, summary="Fetch Google Sheet")
async def fetch_sheet(request: SheetRequest, data_service: DataServiceDep) -> SheetResponse:
    """Download a Google Sheet tab as CSV text."""
    sheet = await data_service.load_sheet(request.url)
    return SheetResponse(
        csv_text=sheet.csv_text,
        export_url=sheet.export_url,
        from_fallback=sheet.from_fallback,
        warnings=sheet.warnings,
    )
