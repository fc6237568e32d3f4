from datetime import datetime
from typing import Optional, List, Dict, Any, Union, Literal, Annotated

from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator


# =========================
# FETCH / VIEW SHAPES
# =========================
class FetchOptions(BaseModel):
    items_per_page: int = Field(default=10, ge=1)
    page: int = Field(default=1, ge=1)
    keywords: str = ""


class Page(BaseModel):
    data: List[Dict[str, Any]] = []
    count: int = 0


class EntityState(BaseModel):
    """
    Envelope returned by categorized reads.
    `loading` is always False once a read returns, it is kept for UI consumers.
    """

    loading: bool = False
    error: Optional[str] = None
    current: Page = Field(default_factory=Page)


class ExpirableEntityState(EntityState):
    personal: Page = Field(default_factory=Page)
    expired: Page = Field(default_factory=Page)


# =========================
# SUPPLY
# =========================
class SupplyBase(BaseModel):
    type: str = Field(min_length=1)
    name: str = Field(min_length=1)
    strength_or_volume: Optional[str] = None
    route_of_use: Optional[str] = None
    quantity_in_pack: Optional[int] = Field(default=None, ge=0)
    possible_side_effects: Optional[str] = None
    location: Optional[str] = None


class SupplyCreate(SupplyBase):
    pass


class SupplyUpdate(BaseModel):
    type: Optional[str] = None
    name: Optional[str] = None
    strength_or_volume: Optional[str] = None
    route_of_use: Optional[str] = None
    quantity_in_pack: Optional[int] = Field(default=None, ge=0)
    possible_side_effects: Optional[str] = None
    location: Optional[str] = None

    @field_validator("type", "name")
    @classmethod
    def _not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("cannot be null")
        return v


class SupplyResponse(SupplyBase):
    id: int
    created_at: datetime
    is_deleted: bool

    model_config = ConfigDict(from_attributes=True)


class SupplyPartial(BaseModel):
    id: Optional[int] = None
    type: Optional[str] = None
    name: Optional[str] = None
    strength_or_volume: Optional[str] = None
    route_of_use: Optional[str] = None
    quantity_in_pack: Optional[int] = None
    possible_side_effects: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    is_deleted: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True)


# =========================
# CREW
# =========================
class CrewBase(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr


class CrewCreate(CrewBase):
    password: str = Field(min_length=8)


class CrewLogin(BaseModel):
    email: EmailStr
    password: str


class CrewUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("cannot be null")
        return v


class CrewResponse(CrewBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CrewPartial(BaseModel):
    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


# =========================
# INVENTORY
# =========================
class InventoryCreate(BaseModel):
    supply_id: int
    quantity: int = Field(ge=0)
    expiry_date: Optional[datetime] = None


class InventoryUpdate(BaseModel):
    quantity: Optional[int] = Field(default=None, ge=0)
    expiry_date: Optional[datetime] = None

    # expiry_date may be cleared, quantity may not
    @field_validator("quantity")
    @classmethod
    def _not_null(cls, v: Optional[int]) -> int:
        if v is None:
            raise ValueError("cannot be null")
        return v


class InventoryPartial(BaseModel):
    id: Optional[int] = None
    supply_id: Optional[int] = None
    quantity: Optional[int] = None
    expiry_date: Optional[datetime] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    is_deleted: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True)


# =========================
# LOG
# =========================
class LogCreate(BaseModel):
    inventory_id: int
    quantity: int


class LogUpdate(BaseModel):
    quantity: Optional[int] = None

    @field_validator("quantity")
    @classmethod
    def _not_null(cls, v: Optional[int]) -> int:
        if v is None:
            raise ValueError("cannot be null")
        return v


# =========================
# LINKS
# A row either points at its parent by id or carries a snapshot of it,
# never both and never neither.
# =========================
class SupplyReference(BaseModel):
    kind: Literal["reference"] = "reference"
    id: int


class SupplySnapshot(BaseModel):
    kind: Literal["embedded"] = "embedded"
    data: SupplyPartial


class InventoryReference(BaseModel):
    kind: Literal["reference"] = "reference"
    id: int


class InventorySnapshot(BaseModel):
    kind: Literal["embedded"] = "embedded"
    data: InventoryPartial


class CrewReference(BaseModel):
    kind: Literal["reference"] = "reference"
    id: int


class CrewSnapshot(BaseModel):
    kind: Literal["embedded"] = "embedded"
    data: CrewPartial


SupplyLink = Annotated[
    Union[SupplyReference, SupplySnapshot], Field(discriminator="kind")
]
InventoryLink = Annotated[
    Union[InventoryReference, InventorySnapshot], Field(discriminator="kind")
]
CrewLink = Annotated[Union[CrewReference, CrewSnapshot], Field(discriminator="kind")]


class InventoryRow(BaseModel):
    id: int
    created_at: datetime
    quantity: int
    expiry_date: Optional[datetime] = None
    user_id: Optional[int] = None
    supply: SupplyLink


class LogRow(BaseModel):
    id: int
    created_at: datetime
    quantity: int
    is_deleted: bool
    inventory: InventoryLink
    crew: CrewLink


# =========================
# ASSISTANT
# =========================
class StockSummary(BaseModel):
    """Structured context handed to the summarising model call."""

    quantity: int
    length: int
    location: Optional[str] = None
    type: Optional[str] = None
    quantity_in_pack: Optional[int] = None
    name: Optional[str] = None
    strength_or_volume: Optional[str] = None
    route_of_use: Optional[str] = None
    possible_side_effects: Optional[str] = None


class Created(BaseModel):
    id: int
