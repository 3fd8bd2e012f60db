"""
Centralized logging configuration for the franchise auction server.

Every module logs through a child of the ``franchise_auction`` logger, so a
single handler set up by ``configure_logging`` formats all of them. Records
carry the request ID and the admin operator when a request is active.
Production uses JSON lines for log aggregation.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ROOT_LOGGER = 'franchise_auction'
AUDIT_LOGGER = f'{ROOT_LOGGER}.audit'

TEXT_FORMAT = '[%(asctime)s] %(levelname)s [%(request_id)s %(operator)s] %(name)s: %(message)s'


def _request_context() -> Dict[str, str]:
    """Request ID and operator of the active request, or '-' placeholders."""
    context = {'request_id': '-', 'operator': '-'}
    try:
        from flask import g, has_request_context, session
        if has_request_context():
            context['request_id'] = getattr(g, 'request_id', '-')
            context['operator'] = session.get('username') or '-'
    except RuntimeError:
        # Outside an application context
        pass
    return context


class RequestContextFilter(logging.Filter):
    """Adds request_id and operator attributes to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _request_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'request_id': getattr(record, 'request_id', '-'),
            'operator': getattr(record, 'operator', '-'),
        }

        if hasattr(record, 'audit'):
            log_data['audit'] = record.audit

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(app) -> logging.Logger:
    """Attach the package handler using the app's LOG_LEVEL and LOG_JSON.

    Safe to call once per app; the previous handler is replaced so test
    apps do not stack handlers.
    """
    level = logging.getLevelName(str(app.config.get('LOG_LEVEL', 'INFO')).upper())
    if not isinstance(level, int):
        level = logging.INFO

    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    if app.config.get('LOG_JSON'):
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    package_logger.addHandler(handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger for a module.

    Names outside the package are nested under it so they share its handler.

    Example:
        from franchise_auction.logger import get_logger
        logger = get_logger(__name__)
        logger.info("Lot opened")
    """
    if name != ROOT_LOGGER and not name.startswith(f'{ROOT_LOGGER}.'):
        name = f'{ROOT_LOGGER}.{name}'
    return logging.getLogger(name)


def log_audit(
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """Record a sale, wallet, round or login action on the audit logger.

    Args:
        action: The action performed (e.g., 'player_sold', 'round_reopened')
        entity_type: Type of entity affected (e.g., 'player', 'team')
        entity_id: ID of the affected entity
        details: Additional details about the action

    Example:
        log_audit('player_sold', 'player', player.id, {
            'team_id': team.id,
            'amount': amount
        })
    """
    audit = {'action': action, 'entity_type': entity_type, 'entity_id': entity_id}
    if details:
        audit['details'] = details

    message = f"AUDIT: {action} on {entity_type}"
    if entity_id is not None:
        message += f" (id={entity_id})"
    if details:
        message += f" - {json.dumps(details, default=str)}"

    logging.getLogger(AUDIT_LOGGER).info(message, extra={'audit': audit})
