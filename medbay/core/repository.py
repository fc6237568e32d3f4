import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from medbay.core import models, schemas
from medbay.core.database import Base
from medbay.core.exceptions import (
    ClaimError,
    DataAccessError,
    DeleteError,
    FailureReason,
    InsertError,
    QueryError,
    RowNotFoundError,
    UpdateError,
)


# -----------------------------------------------------------------------------
# REPOSITORY MODULE
# Purpose: typed table access for every entity, paginated reads, categorized
# reads and row mutations on top of one AsyncSession.
# Reads raise QueryError. Mutations never raise, they return a MutationResult.
# -----------------------------------------------------------------------------

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
Predicate = Callable[[Select], Select]


@dataclass
class MutationResult:
    """Outcome of a write. Truthy on success, carries a tagged error otherwise."""

    ok: bool
    id: Optional[int] = None
    error: Optional[DataAccessError] = None

    def __bool__(self) -> bool:
        return self.ok


class Repository(Generic[ModelT]):
    """
    Plain entity access: one `current` bucket, no soft delete.

    Subclasses pick the model, the columns keyword search runs over,
    and the columns never exposed through projections.
    """

    model: Type[ModelT]
    search_columns: Sequence[str] = ()
    hidden_columns: Sequence[str] = ()
    expand_relationships: Sequence[str] = ()
    soft_deletable: bool = False

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    def table(self) -> str:
        return self.model.__tablename__

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------
    def _visible_columns(self) -> Dict[str, Any]:
        return {
            column.name: column
            for column in self.model.__table__.columns
            if column.name not in self.hidden_columns
        }

    def _columns(self, columns: Optional[Sequence[str]]) -> List[Any]:
        visible = self._visible_columns()
        if not columns or list(columns) == ["*"]:
            return list(visible.values())

        selected = []
        for name in columns:
            if name not in visible:
                raise QueryError(f"column {self.table}.{name} does not exist")
            selected.append(visible[name])
        return selected

    def _base_query(self, columns: Optional[Sequence[str]]) -> Select:
        query = select(*self._columns(columns))
        if self.soft_deletable:
            query = query.where(self.model.is_deleted.is_(False))
        return query

    def _keyword_filter(self, query: Select, keywords: str) -> Select:
        keywords = keywords.strip()
        if not keywords or not self.search_columns:
            return query
        # % and _ typed by the user are matched literally
        escaped = (
            keywords.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        )
        pattern = f"%{escaped}%"
        return query.where(
            or_(
                *[
                    getattr(self.model, name).ilike(pattern, escape="\\")
                    for name in self.search_columns
                ]
            )
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def fetch_page(
        self,
        options: schemas.FetchOptions,
        columns: Optional[Sequence[str]] = None,
        predicate: Optional[Predicate] = None,
    ) -> schemas.Page:
        """
        Fetch one page of rows ordered by id.

        `count` is the number of matching rows before pagination, not the
        length of the page.

        Raises:
            QueryError: the column list is invalid or the backend failed.
        """
        start = options.items_per_page * (options.page - 1)

        query = self._keyword_filter(self._base_query(columns), options.keywords)
        if predicate is not None:
            query = predicate(query)

        count_query = select(func.count()).select_from(query.subquery())
        page_query = (
            query.order_by(self.model.id.asc())
            .offset(start)
            .limit(options.items_per_page)
        )

        try:
            total = (await self.db.execute(count_query)).scalar_one()
            result = await self.db.execute(page_query)
            rows = [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as error:
            logger.error(f"Error fetching data from {self.table}: {error}")
            raise QueryError(str(error)) from error

        return schemas.Page(data=rows, count=total)

    async def read_by_filter(
        self,
        column: str,
        values: Sequence[Any],
        columns: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Point lookup on one column. A single value is an equality match,
        several values match any of them.
        """
        target = self._visible_columns().get(column)
        if target is None:
            raise QueryError(f"column {self.table}.{column} does not exist")
        if not values:
            return []

        query = self._base_query(columns)
        if len(values) == 1:
            query = query.where(target == values[0])
        else:
            query = query.where(target.in_(list(values)))

        try:
            result = await self.db.execute(query.order_by(self.model.id.asc()))
            return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as error:
            logger.error(f"Error fetching row from {self.table}: {error}")
            raise QueryError(str(error)) from error

    async def read_categorized(
        self,
        options: schemas.FetchOptions,
        columns: Optional[Sequence[str]] = None,
    ) -> schemas.EntityState:
        state = schemas.EntityState(loading=True)
        try:
            state.current = await self.fetch_page(options, columns)
        except QueryError as error:
            state.error = error.message or "An error occurred"
        state.loading = False
        return state

    async def get(self, row_id: int, expand: bool = False):
        """Load one row as its typed shape, optionally embedding linked rows."""
        query = (
            select(self.model)
            .where(self.model.id == row_id)
            .execution_options(populate_existing=True)
        )
        if self.soft_deletable:
            query = query.where(self.model.is_deleted.is_(False))
        if expand:
            query = query.options(
                *[selectinload(getattr(self.model, name)) for name in self.expand_relationships]
            )

        try:
            row = (await self.db.execute(query)).scalar_one_or_none()
        except SQLAlchemyError as error:
            logger.error(f"Error fetching row {row_id} from {self.table}: {error}")
            raise QueryError(str(error)) from error

        if row is None:
            raise RowNotFoundError(self.table, row_id)
        return self.to_row(row, expand)

    def to_row(self, row: ModelT, expand: bool = False):
        return {
            name: getattr(row, name) for name in self._visible_columns()
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def _failed(self, error: DataAccessError, action: str) -> MutationResult:
        await self.db.rollback()
        logger.error(f"Error {action} {self.table}: {error.message}")
        return MutationResult(ok=False, error=error)

    async def insert(self, data: Dict[str, Any]) -> MutationResult:
        """Insert one row and return its generated id."""
        try:
            new_row = self.model(**data)
            self.db.add(new_row)
            await self.db.commit()
            await self.db.refresh(new_row)
        except Exception as error:
            return await self._failed(InsertError(str(error)), "adding data to")

        if new_row.id is None:
            return await self._failed(
                InsertError(
                    "No data returned from insert operation",
                    FailureReason.NO_ROW_RETURNED,
                ),
                "adding data to",
            )
        return MutationResult(ok=True, id=new_row.id)

    async def _apply(
        self,
        row_id: int,
        values: Dict[str, Any],
        error_cls: Type[DataAccessError],
        action: str,
        include_deleted: bool = False,
    ) -> MutationResult:
        """
        Run `UPDATE ... SET <values> WHERE id = row_id`.
        Only the given keys change, other columns keep their stored value.
        Deleted rows count as missing unless `include_deleted` is set.
        An empty `values` changes nothing and succeeds when the row exists.
        """
        conditions = [self.model.id == row_id]
        if self.soft_deletable and not include_deleted:
            conditions.append(self.model.is_deleted.is_(False))

        try:
            if values:
                result = await self.db.execute(
                    update(self.model).where(*conditions).values(**values)
                )
                matched = result.rowcount
            else:
                result = await self.db.execute(select(self.model.id).where(*conditions))
                matched = len(result.all())

            if matched == 0:
                return await self._failed(
                    error_cls(f"No row {row_id} in {self.table}", FailureReason.NOT_FOUND),
                    action,
                )
            await self.db.commit()
        except Exception as error:
            return await self._failed(error_cls(str(error)), action)

        return MutationResult(ok=True, id=row_id)

    async def update(self, row_id: int, data: Dict[str, Any]) -> MutationResult:
        return await self._apply(row_id, data, UpdateError, "updating row in")


class DeletableRepository(Repository[ModelT]):
    """Entities with an `is_deleted` tombstone. Reads skip deleted rows."""

    soft_deletable = True

    async def soft_delete(self, row_id: int) -> MutationResult:
        # Deleting an already deleted row matches it again and succeeds
        return await self._apply(
            row_id,
            {"is_deleted": True},
            DeleteError,
            "deleting row in",
            include_deleted=True,
        )


class ExpirableRepository(Repository[ModelT]):
    """
    Entities with an owner and an expiry date, read as three buckets:

    - current: unowned and not yet expired (or with no expiry date)
    - personal: owned by someone, whatever the expiry date
    - expired: unowned and past its expiry date
    """

    def bucket_predicates(self, now: datetime) -> Dict[str, Predicate]:
        owner = self.model.user_id
        expiry = self.model.expiry_date
        return {
            "current": lambda query: query.where(
                owner.is_(None), or_(expiry.is_(None), expiry >= now)
            ),
            "personal": lambda query: query.where(owner.is_not(None)),
            "expired": lambda query: query.where(owner.is_(None), expiry < now),
        }

    async def read_categorized(
        self,
        options: schemas.FetchOptions,
        columns: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> schemas.ExpirableEntityState:
        # All three buckets must see the same instant or a row can fall between them
        now = now or datetime.now(timezone.utc)
        state = schemas.ExpirableEntityState(loading=True)

        try:
            buckets = {}
            for name, predicate in self.bucket_predicates(now).items():
                buckets[name] = await self.fetch_page(options, columns, predicate)
        except QueryError as error:
            state.error = error.message or "An error occurred"
        else:
            state.current = buckets["current"]
            state.personal = buckets["personal"]
            state.expired = buckets["expired"]

        state.loading = False
        return state

    async def claim(self, row_id: int, user_id: int) -> MutationResult:
        """Stamp the row with the requesting crew member as its owner."""
        return await self._apply(
            row_id, {"user_id": user_id}, ClaimError, "claiming row in"
        )


# =========================
# Entity repositories
# =========================
class SupplyRepository(DeletableRepository[models.Supply]):
    model = models.Supply
    search_columns = ("name", "type", "location")

    def to_row(self, row: models.Supply, expand: bool = False):
        return schemas.SupplyResponse.model_validate(row)


class CrewRepository(Repository[models.Crew]):
    model = models.Crew
    search_columns = ("first_name", "last_name", "email")
    hidden_columns = ("password",)

    def to_row(self, row: models.Crew, expand: bool = False):
        return schemas.CrewResponse.model_validate(row)


class InventoryRepository(
    DeletableRepository[models.Inventory], ExpirableRepository[models.Inventory]
):
    # Deleted lots (used up or discarded) are left out of every bucket
    model = models.Inventory
    expand_relationships = ("supply",)

    def to_row(self, row: models.Inventory, expand: bool = False):
        if expand:
            supply = schemas.SupplySnapshot(
                data=schemas.SupplyPartial.model_validate(row.supply)
            )
        else:
            supply = schemas.SupplyReference(id=row.supply_id)

        return schemas.InventoryRow(
            id=row.id,
            created_at=row.created_at,
            quantity=row.quantity,
            expiry_date=row.expiry_date,
            user_id=row.user_id,
            supply=supply,
        )


class LogRepository(DeletableRepository[models.Log]):
    model = models.Log
    expand_relationships = ("inventory", "crew")

    def to_row(self, row: models.Log, expand: bool = False):
        if expand:
            inventory = schemas.InventorySnapshot(
                data=schemas.InventoryPartial.model_validate(row.inventory)
            )
            crew = schemas.CrewSnapshot(data=schemas.CrewPartial.model_validate(row.crew))
        else:
            inventory = schemas.InventoryReference(id=row.inventory_id)
            crew = schemas.CrewReference(id=row.user_id)

        return schemas.LogRow(
            id=row.id,
            created_at=row.created_at,
            quantity=row.quantity,
            is_deleted=row.is_deleted,
            inventory=inventory,
            crew=crew,
        )
