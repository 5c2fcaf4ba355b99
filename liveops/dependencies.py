"""Shared FastAPI dependencies.

Authentication is handled upstream; the gateway forwards the acting
employee id in ``X-Actor-Id`` for the audit trail.
"""

from typing import Optional

from fastapi import Header


async def get_actor_id(x_actor_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Acting employee id for audit entries (may be absent for system calls)."""
    return x_actor_id
