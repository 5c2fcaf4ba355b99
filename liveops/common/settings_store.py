"""Async access to the ``app_settings`` key/value table.

Writes are idempotent upserts keyed by setting key; concurrent writers
resolve last-writer-wins.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liveops.common.models import AppSetting

logger = logging.getLogger(__name__)


def company_key(prefix: str, company: str) -> str:
    """Build the company-scoped key, e.g. ``kpi_system_Visibel``."""
    return f"{prefix}{company}"


class SettingsStore:
    """Read / upsert JSON blobs in ``app_settings``."""

    @staticmethod
    async def get_value(db: AsyncSession, key: str) -> Optional[Any]:
        result = await db.execute(select(AppSetting).where(AppSetting.key == key))
        row = result.scalar_one_or_none()
        return row.value if row else None

    @staticmethod
    async def upsert_value(
        db: AsyncSession,
        key: str,
        value: Any,
        *,
        description: Optional[str] = None,
    ) -> AppSetting:
        result = await db.execute(select(AppSetting).where(AppSetting.key == key))
        row = result.scalar_one_or_none()
        if row is None:
            row = AppSetting(key=key, value=value, description=description)
            db.add(row)
        else:
            row.value = value
            if description is not None:
                row.description = description
        await db.flush()
        logger.info("Saved setting %s", key)
        return row
