"""
SQLAlchemy models for the FuelEU Ledger database.
"""

from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from api.database import Base


class Route(Base):
    """Route physical data for one ship and reporting year."""

    __tablename__ = "routes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    route_id = Column(String(100), nullable=False, unique=True, index=True)
    vessel_type = Column(String(100), nullable=False, default="")
    fuel_type = Column(String(50), nullable=False, default="")
    year = Column(Integer, nullable=False, index=True)
    ghg_intensity = Column(Float, nullable=False)  # gCO2eq/MJ
    fuel_consumption = Column(Float, nullable=False)  # t
    distance = Column(Float, nullable=False, default=0.0)  # km
    total_emissions = Column(Float, nullable=False, default=0.0)  # t CO2eq
    is_baseline = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def __repr__(self):
        return f"<Route(route_id='{self.route_id}', year={self.year})>"


class ShipCompliance(Base):
    """Running Compliance Balance for one ship and year."""

    __tablename__ = "ship_compliance"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ship_id = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    cb_gco2eq = Column(Float, nullable=False)
    energy_mj = Column(Float, nullable=False)
    actual_intensity = Column(Float, nullable=False)
    target_intensity = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("ship_id", "year", name="uq_ship_compliance_ship_year"),
    )

    def __repr__(self):
        return f"<ShipCompliance(ship_id='{self.ship_id}', year={self.year}, cb={self.cb_gco2eq})>"


class BankEntry(Base):
    """Banked surplus slice.

    Integer identity gives a strict creation order for FIFO consumption
    even when two entries share a timestamp.
    """

    __tablename__ = "bank_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ship_id = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    amount_gco2eq = Column(Float, nullable=False)
    applied = Column(Boolean, default=False, nullable=False)
    applied_year = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_bank_entries_ship_applied", "ship_id", "applied"),
    )

    def __repr__(self):
        return (
            f"<BankEntry(ship_id='{self.ship_id}', year={self.year}, "
            f"amount={self.amount_gco2eq}, applied={self.applied})>"
        )


class Pool(Base):
    """Pooling event. Never modified after creation."""

    __tablename__ = "pools"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    year = Column(Integer, nullable=False, index=True)
    total_cb = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    members = relationship(
        "PoolMember", back_populates="pool", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Pool(id={self.id}, year={self.year}, total_cb={self.total_cb})>"


class PoolMember(Base):
    """One ship's balance before and after a pool."""

    __tablename__ = "pool_members"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    pool_id = Column(
        UUID(as_uuid=True), ForeignKey("pools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ship_id = Column(String(100), nullable=False)
    cb_before = Column(Float, nullable=False)
    cb_after = Column(Float, nullable=False)

    # Relationships
    pool = relationship("Pool", back_populates="members")

    def __repr__(self):
        return f"<PoolMember(ship_id='{self.ship_id}', cb_before={self.cb_before}, cb_after={self.cb_after})>"
