"""
Flask extensions shared across the app.

Created unbound here and attached in ``create_app``. Rate limit storage
comes from ``RATELIMIT_STORAGE_URI`` in the config (in-memory by default).
"""

from flask import session
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect


def rate_limit_key() -> str:
    """Limit logged-in operators per account and everyone else per address.

    Several bid consoles can sit behind one venue NAT, so admins are
    keyed by username.
    """
    username = session.get('username') if session.get('is_admin') else None
    if username:
        return f'admin:{username}'
    return get_remote_address()


limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=["300 per minute"],
)

# JSON clients fetch a token from /api/auth/csrf-token and send it back in
# the X-CSRFToken header
csrf = CSRFProtect()
