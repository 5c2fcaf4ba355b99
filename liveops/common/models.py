"""Common ORM models: AppSetting (company-scoped configuration blobs)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from liveops.database import Base


class AppSetting(Base):
    """Key/value store for JSON configuration blobs.

    Keys are namespaced per company, e.g. ``kpi_system_<company>``.
    """

    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(sa.String(150), primary_key=True)
    value: Mapped[dict] = mapped_column(JSONB, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
