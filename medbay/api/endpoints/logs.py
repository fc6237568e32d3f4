from fastapi import APIRouter, HTTPException, status

from medbay.api.deps import columns_dep, db_dep, ensure_ok, options_dep, user_dep
from medbay.core import schemas
from medbay.core.exceptions import RowNotFoundError
from medbay.core.repository import LogRepository

router = APIRouter(prefix="/logs", tags=["Logs"])


@router.get("", response_model=schemas.EntityState)
async def list_logs(db: db_dep, options: options_dep, columns: columns_dep):
    return await LogRepository(db).read_categorized(options, columns)


@router.get("/{log_id}", response_model=schemas.LogRow)
async def get_log(log_id: int, db: db_dep, expand: bool = False):
    try:
        return await LogRepository(db).get(log_id, expand=expand)
    except RowNotFoundError as error:
        raise HTTPException(status.HTTP_404_NOT_FOUND, error.message)


# The entry is recorded against the crew member making the request
@router.post("", response_model=schemas.Created, status_code=status.HTTP_201_CREATED)
async def add_log(entry: schemas.LogCreate, db: db_dep, current_user: user_dep):
    result = await LogRepository(db).insert(
        {**entry.model_dump(), "user_id": current_user.id}
    )
    ensure_ok(result, "Failed to add a log entry")
    return {"id": result.id}


@router.patch("/{log_id}", response_model=schemas.LogRow)
async def update_log(log_id: int, changes: schemas.LogUpdate, db: db_dep):
    repository = LogRepository(db)
    result = await repository.update(log_id, changes.model_dump(exclude_unset=True))
    ensure_ok(result, "Update failed")
    return await repository.get(log_id)


@router.delete("/{log_id}")
async def delete_log(log_id: int, db: db_dep):
    result = await LogRepository(db).soft_delete(log_id)
    ensure_ok(result, "Failed to delete a log entry")
    return {"message": f"Deleted log {log_id}"}
