"""KPI input ORM models: ContentPost (creator output) and LiveReport (host GMV)."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from liveops.database import Base


class ContentPost(Base):
    """A planned or published piece of content; counts as output once posted."""

    __tablename__ = "content_posts"
    __table_args__ = (
        sa.Index("ix_content_posts_company_posting_date", "company", "posting_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    company: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    creator_id: Mapped[str] = mapped_column(
        sa.String(64),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(sa.String(300), nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(sa.String(100))
    platform: Mapped[Optional[str]] = mapped_column(sa.String(30))
    # Unposted plans carry no posting date and are not output yet.
    posting_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    link: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )


class LiveReport(Base):
    """One live-streaming session report with its gross merchandise value."""

    __tablename__ = "live_reports"
    __table_args__ = (
        sa.Index("ix_live_reports_company_report_date", "company", "report_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    company: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    host_id: Mapped[str] = mapped_column(
        sa.String(64),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    report_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(sa.String(100))
    gmv: Mapped[int] = mapped_column(sa.BigInteger, nullable=False, default=0)
    duration_minutes: Mapped[int] = mapped_column(sa.Integer, default=0)
    total_views: Mapped[int] = mapped_column(sa.Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
