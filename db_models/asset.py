# db_models/asset.py
from datetime import date, datetime

from sqlalchemy import String, Float, Date, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from db_base import Base
from db_models.columns import enum_column, new_id, utcnow
from db_models.enums import AssetStatus, DeviceType


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    device_type: Mapped[DeviceType] = mapped_column(
        enum_column(DeviceType, "device_type"),
        nullable=False,
    )
    brand: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)

    # Unique per organisation in practice; not enforced here
    serial_number: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False,
    )

    status: Mapped[AssetStatus] = mapped_column(
        enum_column(AssetStatus, "asset_status"),
        nullable=False,
        default=AssetStatus.ACTIVE,
    )

    # Opaque user id from the identity provider
    assigned_to: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    purchase_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    warranty_expiry: Mapped[date | None] = mapped_column(Date, nullable=True)
    maintenance_due: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Stored scan tag, looked up by the scan flow
    qr_code: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=utcnow,
    )
