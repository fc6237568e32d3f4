from fastapi import APIRouter, HTTPException, status

from medbay.api.deps import columns_dep, db_dep, ensure_ok, options_dep
from medbay.core import schemas
from medbay.core.exceptions import RowNotFoundError
from medbay.core.repository import SupplyRepository

router = APIRouter(prefix="/supplies", tags=["Supplies"])


# Catalog page, deleted supplies are left out
@router.get("", response_model=schemas.EntityState)
async def list_supplies(db: db_dep, options: options_dep, columns: columns_dep):
    return await SupplyRepository(db).read_categorized(options, columns)


@router.get("/{supply_id}", response_model=schemas.SupplyResponse)
async def get_supply(supply_id: int, db: db_dep):
    try:
        return await SupplyRepository(db).get(supply_id)
    except RowNotFoundError as error:
        raise HTTPException(status.HTTP_404_NOT_FOUND, error.message)


@router.post("", response_model=schemas.Created, status_code=status.HTTP_201_CREATED)
async def add_supply(supply: schemas.SupplyCreate, db: db_dep):
    result = await SupplyRepository(db).insert(supply.model_dump())
    ensure_ok(result, "Failed to add a supply")
    return {"id": result.id}


# Only the fields sent in the body are changed
@router.patch("/{supply_id}", response_model=schemas.SupplyResponse)
async def update_supply(supply_id: int, changes: schemas.SupplyUpdate, db: db_dep):
    repository = SupplyRepository(db)
    result = await repository.update(supply_id, changes.model_dump(exclude_unset=True))
    ensure_ok(result, "Update failed")
    return await repository.get(supply_id)


@router.delete("/{supply_id}")
async def delete_supply(supply_id: int, db: db_dep):
    result = await SupplyRepository(db).soft_delete(supply_id)
    ensure_ok(result, "Failed to delete a supply")
    return {"message": f"Deleted supply {supply_id}"}
