from typing import Annotated, List, Optional

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from medbay.core import models, schemas
from medbay.core.database import get_db
from medbay.core.exceptions import FailureReason
from medbay.core.repository import MutationResult
from medbay.core.security import get_current_user

db_dep = Annotated[AsyncSession, Depends(get_db)]
user_dep = Annotated[models.Crew, Depends(get_current_user)]


def fetch_options(
    items_per_page: int = Query(10, ge=1),
    page: int = Query(1, ge=1),
    keywords: str = "",
) -> schemas.FetchOptions:
    return schemas.FetchOptions(
        items_per_page=items_per_page, page=page, keywords=keywords
    )


# "?columns=id,name" -> ["id", "name"], missing means every column
def column_list(columns: Optional[str] = None) -> Optional[List[str]]:
    if not columns:
        return None
    return [name.strip() for name in columns.split(",") if name.strip()]


options_dep = Annotated[schemas.FetchOptions, Depends(fetch_options)]
columns_dep = Annotated[Optional[List[str]], Depends(column_list)]


def ensure_ok(result: MutationResult, detail: str) -> None:
    """Turn a failed mutation into 404 (no such row) or 500 (anything else)."""
    if result:
        return
    if result.error is not None and result.error.reason == FailureReason.NOT_FOUND:
        raise HTTPException(status.HTTP_404_NOT_FOUND, result.error.message)
    raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
