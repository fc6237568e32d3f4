from fastapi import APIRouter, HTTPException, status

from medbay.api.deps import columns_dep, db_dep, ensure_ok, options_dep, user_dep
from medbay.core import schemas
from medbay.core.exceptions import RowNotFoundError
from medbay.core.repository import InventoryRepository

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("", response_model=schemas.ExpirableEntityState)
async def list_inventory(db: db_dep, options: options_dep, columns: columns_dep):
    """
    Stock lots split into current (shared and usable), personal (claimed)
    and expired (shared but past expiry).
    """
    return await InventoryRepository(db).read_categorized(options, columns)


@router.get("/{lot_id}", response_model=schemas.InventoryRow)
async def get_lot(lot_id: int, db: db_dep, expand: bool = False):
    try:
        return await InventoryRepository(db).get(lot_id, expand=expand)
    except RowNotFoundError as error:
        raise HTTPException(status.HTTP_404_NOT_FOUND, error.message)


@router.post("", response_model=schemas.Created, status_code=status.HTTP_201_CREATED)
async def add_lot(lot: schemas.InventoryCreate, db: db_dep):
    result = await InventoryRepository(db).insert(lot.model_dump())
    ensure_ok(result, "Failed to add an inventory lot")
    return {"id": result.id}


@router.patch("/{lot_id}", response_model=schemas.InventoryRow)
async def update_lot(lot_id: int, changes: schemas.InventoryUpdate, db: db_dep):
    repository = InventoryRepository(db)
    result = await repository.update(lot_id, changes.model_dump(exclude_unset=True))
    ensure_ok(result, "Update failed")
    return await repository.get(lot_id)


# Retire a used up or discarded lot, it stops counting towards stock
@router.delete("/{lot_id}")
async def delete_lot(lot_id: int, db: db_dep):
    result = await InventoryRepository(db).soft_delete(lot_id)
    ensure_ok(result, "Failed to delete an inventory lot")
    return {"message": f"Deleted inventory lot {lot_id}"}


# Move a lot into the caller's personal bucket
@router.post("/{lot_id}/claim", response_model=schemas.InventoryRow)
async def claim_lot(lot_id: int, db: db_dep, current_user: user_dep):
    repository = InventoryRepository(db)
    result = await repository.claim(lot_id, current_user.id)
    ensure_ok(result, "Failed to claim an inventory lot")
    return await repository.get(lot_id)
