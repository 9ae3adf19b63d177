import uuid
from decimal import Decimal

from sqlalchemy import UUID, JSON, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class OrganizationSplitRules(Base):
    __tablename__ = "organization_split_rules"

    organization_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("organizations.id"), primary_key=True)
    platform_fee_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    platform_fee_fixed_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    release_days: Mapped[int] = mapped_column(Integer, nullable=False)


class PlatformSetting(Base):
    __tablename__ = "platform_settings"

    setting_key: Mapped[str] = mapped_column(String, primary_key=True)
    setting_value: Mapped[dict] = mapped_column(JSON, nullable=False)
