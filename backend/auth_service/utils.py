"""
Shared authentication helpers.
Provides token creation, verification, and the login_required gate.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Callable, Dict, Optional

import jwt
from flask import g, request

from backend import config
from backend.database.db_connection import get_db
from backend.errors import Unauthenticated

USER_COLUMNS = """
    user_id, username, email, first_name, last_name, profile_picture,
    bio, location, skills, interests, social_links, is_verified, created_at
"""


# --- JWT CREATION ---
def create_token(user_id: int) -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user_id (int): The unique ID of the user.

    Returns:
        str: Encoded JWT string, valid for TOKEN_EXPIRATION_DAYS.
    """
    now = datetime.now(timezone.utc)

    payload = {
        # PyJWT requires "sub" to be a string
        "sub": str(user_id),
        "exp": now + timedelta(days=config.TOKEN_EXPIRATION_DAYS),
        "iat": now
    }

    return jwt.encode(payload, config.JWT_SECRET, algorithm="HS256")


# --- JWT VALIDATION ---
def verify_token(token: str) -> Optional[int]:
    """
    Validate a JWT.

    Args:
        token (str): JWT string.

    Returns:
        int: user_id if valid, None otherwise.
    """
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        logging.info("[Auth] Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        return None

    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


def verify_token_from_request() -> int:
    """
    Verify the JWT in the Authorization header.

    Returns:
        int: The id of the user the token was issued to.

    Raises:
        Unauthenticated: Header missing, not a Bearer token, or token invalid/expired.
    """
    auth = request.headers.get("Authorization", "")

    if not auth.startswith("Bearer "):
        raise Unauthenticated("No token, authorization denied")

    token = auth.split(" ", 1)[1].strip()
    user_id = verify_token(token)
    if user_id is None:
        raise Unauthenticated("Token is not valid")

    return user_id


def load_user(user_id: int) -> Optional[Dict[str, Any]]:
    """Fetch a user row (without the password hash) by id."""
    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE user_id = %s;", (user_id,))
            return cur.fetchone()


def login_required(view: Callable) -> Callable:
    """
    Resolve the bearer token to a user before running the view.

    The user row is stored on flask.g.current_user. A valid token whose user
    no longer exists is treated like an invalid token.
    """
    @wraps(view)
    def wrapper(*args, **kwargs):
        user_id = verify_token_from_request()
        user = load_user(user_id)
        if not user:
            raise Unauthenticated("Token is not valid")
        g.current_user = user
        return view(*args, **kwargs)

    return wrapper
