"""
Request helpers shared by the API blueprints.

JSON envelopes, the admin guard, body parsing and the integer checks used
for ids, prices and bid amounts.
"""

from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from flask import Response, jsonify, request, session

F = TypeVar('F', bound=Callable[..., Any])

JsonResult = Tuple[Response, int]


# ==================== RESPONSE HELPERS ====================

def success_response(data: Optional[Dict[str, Any]] = None, message: Optional[str] = None,
                     **kwargs: Any) -> JsonResult:
    """``{'success': True, ...}`` with an optional message, status 200."""
    body: Dict[str, Any] = {'success': True}
    if message:
        body['message'] = message
    body.update(data or {})
    body.update(kwargs)
    return jsonify(body), 200


def error_response(error: str, status_code: int = 400, **kwargs: Any) -> JsonResult:
    """``{'success': False, 'error': error, ...}`` with the given status."""
    body: Dict[str, Any] = {'success': False, 'error': error}
    body.update(kwargs)
    return jsonify(body), status_code


# ==================== AUTHENTICATION HELPERS ====================

def is_admin() -> bool:
    return bool(session.get('is_admin'))


def admin_required(f: F) -> F:
    """Reject the request with 403 unless an admin is logged in.

    Operator actions (opening lots, entering bids, selling, wallet edits)
    all sit behind this.
    """
    @wraps(f)
    def decorated_function(*args: Any, **kwargs: Any) -> Any:
        if not is_admin():
            return error_response('Admin login required', 403)
        return f(*args, **kwargs)
    return decorated_function  # type: ignore


# ==================== INPUT VALIDATION ====================

def get_json_body() -> Tuple[Optional[Dict[str, Any]], Optional[JsonResult]]:
    """Parse the request body as a JSON object.

    Returns:
        ``(data, None)`` on success, ``(None, error)`` when the body is
        missing, malformed or not an object.

    Example:
        data, error = get_json_body()
        if error:
            return error
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return None, error_response('Request body is required')
    return data, None


def get_json_with_fields(required_fields: List[str]) -> Tuple[Optional[Dict[str, Any]], Optional[JsonResult]]:
    """Like ``get_json_body`` but also requires non-null fields.

    Example:
        data, error = get_json_with_fields(['player_id', 'team_id', 'amount'])
    """
    data, error = get_json_body()
    if error:
        return None, error

    missing = [name for name in required_fields if data.get(name) is None]
    if missing:
        return None, error_response(f"Missing required fields: {', '.join(missing)}")
    return data, None


def validate_positive_int(value: Any, field_name: str,
                          allow_zero: bool = False) -> Tuple[Optional[int], Optional[str]]:
    """
    Coerce an id, price or amount to int.

    Accepts ints, numeric strings and whole-number floats such as 1500.0
    (JSON clients often send those). Rejects booleans and fractions.

    Returns:
        ``(value, None)`` or ``(None, error message)``.
    """
    if isinstance(value, bool):
        return None, f"{field_name} must be a valid integer"

    if isinstance(value, float):
        if not value.is_integer():
            return None, f"{field_name} must be a whole number"
        number = int(value)
    else:
        try:
            number = int(value)
        except (TypeError, ValueError):
            return None, f"{field_name} must be a valid integer"

    if number < 0 or (number == 0 and not allow_zero):
        return None, f"{field_name} must be {'non-negative' if allow_zero else 'positive'}"
    return number, None


# ==================== STRING UTILITIES ====================

def normalize_player_name(name: str) -> str:
    """Key used to spot duplicate players: lowercase, no periods, single spaces.

    >>> normalize_player_name('M.S.  Dhoni')
    'ms dhoni'
    """
    if not name:
        return ''
    return ' '.join(name.lower().replace('.', '').split())
