"""Rate limiting for attendance writes (slowapi).

The module-level ``limiter`` is wired into the app in ``main.py``; routers
decorate individual endpoints with ``@limiter.limit(...)``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Clock actions are the only hot write path; everything else uses the default.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["120/minute"],
)
