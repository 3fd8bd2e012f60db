"""
Authentication utilities for the franchise auction server.

Provides bcrypt password hashing, the admin credential check used by the
login endpoint and the ``flask hash-password`` command for producing
ADMIN_PASSWORD_HASH.
"""

import hmac

import bcrypt
import click
from flask import current_app

from franchise_auction.logger import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Example:
        >>> hashed = hash_password('my_secure_password')
        >>> verify_password('my_secure_password', hashed)
        True
    """
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        password: The plaintext password to verify.
        hashed: The bcrypt hash to check against.

    Returns:
        True if the password matches, False otherwise.
    """
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except (ValueError, TypeError):
        return False


def check_admin_credentials(username: str, password: str) -> bool:
    """Check login credentials against the configured admin account.

    ADMIN_PASSWORD_HASH is preferred; the plaintext ADMIN_PASSWORD is
    only consulted when no hash is configured.
    """
    if not username or not password:
        return False

    expected_user = current_app.config.get('ADMIN_USERNAME') or ''
    if not hmac.compare_digest(username.encode('utf-8'), expected_user.encode('utf-8')):
        return False

    password_hash = current_app.config.get('ADMIN_PASSWORD_HASH')
    if password_hash:
        return verify_password(password, password_hash)

    plain = current_app.config.get('ADMIN_PASSWORD')
    if not plain:
        logger.warning("No admin password configured; refusing login")
        return False
    return hmac.compare_digest(password.encode('utf-8'), plain.encode('utf-8'))


@click.command('hash-password')
def hash_password_command() -> None:
    """Prompt for a password and print its bcrypt hash for ADMIN_PASSWORD_HASH."""
    password = click.prompt('Password', hide_input=True, confirmation_prompt=True)
    click.echo(hash_password(password))
    logger.info("Generated an admin password hash")
