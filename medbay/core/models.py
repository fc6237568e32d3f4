from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    String,
    Boolean,
    TIMESTAMP,
    Text,
    false,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from medbay.core.database import Base


# =========================
# Supply (catalog)
# =========================
class Supply(Base):
    """
    A catalog entry for one medication or supply item.
    Never physically removed, `is_deleted` marks tombstones.
    """

    __tablename__ = "supplies"

    id = Column(Integer, primary_key=True, autoincrement=True)

    type = Column(String, nullable=False)  # "Tablet", "Liquid", "Bandage"
    name = Column(String, nullable=False, index=True)
    strength_or_volume = Column(String)
    route_of_use = Column(String)  # oral/topical/IV
    quantity_in_pack = Column(Integer)
    possible_side_effects = Column(Text)
    location = Column(String)

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())

    # Relationships
    lots = relationship("Inventory", back_populates="supply")


# =========================
# Crew
# =========================
class Crew(Base):
    __tablename__ = "crew"

    id = Column(Integer, primary_key=True, autoincrement=True)

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)

    # Login credentials for the identity surface
    email = Column(String, nullable=False, unique=True, index=True)
    password = Column(String, nullable=False)

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # Relationships
    claimed_lots = relationship("Inventory", back_populates="owner")
    logs = relationship("Log", back_populates="crew")


# =========================
# Inventory (stock lots)
# =========================
class Inventory(Base):
    """
    One stock lot of a supply.

    A lot with `user_id` set has been claimed and belongs to that crew member.
    A lot without `expiry_date` never expires.
    A used up or discarded lot is retired with `is_deleted`, never removed.
    """

    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, autoincrement=True)

    supply_id = Column(
        Integer,
        ForeignKey("supplies.id"),
        nullable=False,
        index=True,
    )
    quantity = Column(Integer, nullable=False, default=0)
    expiry_date = Column(TIMESTAMP(timezone=True), nullable=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("crew.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())

    # Relationships
    supply = relationship("Supply", back_populates="lots")
    owner = relationship("Crew", back_populates="claimed_lots")
    logs = relationship("Log", back_populates="inventory")


# =========================
# Log (audit trail)
# =========================
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    inventory_id = Column(
        Integer,
        ForeignKey("inventory.id"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Integer,
        ForeignKey("crew.id"),
        nullable=False,
        index=True,
    )
    quantity = Column(Integer, nullable=False)

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())

    # Relationships
    inventory = relationship("Inventory", back_populates="logs")
    crew = relationship("Crew", back_populates="logs")
