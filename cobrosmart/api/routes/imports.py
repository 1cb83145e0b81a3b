"""
Debtor import API endpoint.

POST /import - Insert or update debtors from spreadsheet rows.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from cobrosmart.api.dependencies import get_business_id, get_store
from cobrosmart.api.errors import ErrorCode, ErrorResponse, ValidationError
from cobrosmart.api.models.requests import ImportRequest
from cobrosmart.engine.importer import ImportReport, import_rows
from cobrosmart.store.base import CollectionStore

logger = logging.getLogger(__name__)
router = APIRouter()

MAX_IMPORT_ROWS = 5000


@router.post(
    "/import",
    response_model=ImportReport,
    responses={
        400: {"model": ErrorResponse, "description": "Body is not { rows: [...] }"},
        500: {"model": ErrorResponse, "description": "Configuration or store error"},
    },
)
async def import_debtors(
    import_request: Optional[ImportRequest] = None,
    store: CollectionStore = Depends(get_store),
    business_id: str = Depends(get_business_id),
) -> ImportReport:
    """
    Import debtors.

    Rows that fail validation are counted as rejected; the first 10 problems
    are reported with their 1-based row number.
    """
    rows = import_request.rows if import_request else None
    if not isinstance(rows, list):
        raise ValidationError(
            "Body must be JSON: { rows: [...] }", error_code=ErrorCode.INVALID_PAYLOAD
        )
    if len(rows) > MAX_IMPORT_ROWS:
        raise ValidationError(
            f"At most {MAX_IMPORT_ROWS} rows per import.",
            details={"rows": len(rows)},
            error_code=ErrorCode.INVALID_PAYLOAD,
        )

    logger.info(f"Importing {len(rows)} rows")
    return await import_rows(store, business_id, rows)
