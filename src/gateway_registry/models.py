"""SQLAlchemy models for the gateway registry."""

import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base

GATEWAY_STATUSES = ("active", "inactive", "decommissioned")
DEVICE_STATUSES = ("online", "offline", "maintenance")
GATEWAY_ACTIONS = ("CREATED", "UPDATED", "DEVICE_ATTACHED", "DEVICE_DETACHED", "DELETED")


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    return f"{column} IN ({', '.join(repr(value) for value in values)})"


class DeviceType(Base):
    """Reference catalog entry a peripheral device points at."""

    __tablename__ = "device_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class Gateway(Base):
    """Managed network gateway that can host peripheral devices."""

    __tablename__ = "gateways"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    serial_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    ipv4_address: Mapped[str] = mapped_column(String(15), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active")
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Devices outlive their gateway, so no delete cascade here.
    devices: Mapped[list["PeripheralDevice"]] = relationship(
        back_populates="gateway",
        passive_deletes=True,
        order_by="PeripheralDevice.created_at",
    )

    __table_args__ = (
        CheckConstraint(_in_clause("status", GATEWAY_STATUSES), name="ck_gateways_status"),
    )


class PeripheralDevice(Base):
    """Endpoint device, optionally attached to a gateway."""

    __tablename__ = "peripheral_devices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    uid: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    vendor: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="offline")
    device_type_id: Mapped[int] = mapped_column(Integer, ForeignKey("device_types.id"), nullable=False)
    gateway_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("gateways.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    gateway: Mapped[Gateway | None] = relationship(back_populates="devices")
    device_type: Mapped[DeviceType] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint(_in_clause("status", DEVICE_STATUSES), name="ck_peripheral_devices_status"),
        CheckConstraint("uid > 0", name="ck_peripheral_devices_uid"),
    )


class GatewayLog(Base):
    """Append-only audit entry for an action taken on a gateway.

    ``gateway_id`` carries no foreign key: the repository removes a
    gateway's entries together with the gateway, and the DELETED entry
    written afterwards has to outlive the row it describes.
    """

    __tablename__ = "gateway_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gateway_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(_in_clause("action", GATEWAY_ACTIONS), name="ck_gateway_logs_action"),
    )
