"""
Authentication service route handlers.

Provides routes for:
- User registration
- User login
- Profile retrieval (/me)
- Profile update (/profile PUT)

All JWT logic is delegated to `auth_service.utils`.
"""

import logging
from typing import Any, Dict, Tuple

import psycopg2.errors
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from flask import Blueprint, Response, g, jsonify, request
from psycopg2.extras import Json

from backend.auth_service.utils import USER_COLUMNS, create_token, login_required
from backend.database.db_connection import get_db
from backend.errors import Conflict, InvalidCredentials, NotFound, ValidationError
from backend.schemas import (
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserOut,
    UserProfile,
    parse_body,
    user_from_row,
)

auth_bp = Blueprint("auth", __name__)
ph = PasswordHasher()

# JSON field -> users column, for the editable profile fields
PROFILE_COLUMNS = {
    "first_name": "first_name",
    "last_name": "last_name",
    "bio": "bio",
    "location": "location",
    "skills": "skills",
    "interests": "interests",
    "social_links": "social_links",
    "profile_picture": "profile_picture",
}

# Unique constraint name -> conflicting field
UNIQUE_CONSTRAINTS = {
    "users_email_key": "email",
    "users_username_key": "username",
}


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log every incoming request to the authentication service.
    Headers are left out so bearer tokens never reach the logs.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user in the system.

    Expects a JSON body with:
    - username (str): Unique, 3-30 characters.
    - email (str): Unique email address.
    - password (str): At least PASSWORD_MIN_LENGTH characters.
    - firstName, lastName (str, optional)

    Returns:
        201: JSON with message, token and the public user object.
        400: Missing/invalid fields, or username/email already taken.
        500: Server-side error (hashing or database).
    """
    body = parse_body(RegisterRequest)

    with get_db() as conn:
        with conn.cursor() as cur:
            # Email is checked first so a request matching both reports "email"
            cur.execute(
                "SELECT username, email FROM users WHERE email = %s OR username = %s;",
                (body.email, body.username),
            )
            existing = cur.fetchall()
            if any(row["email"] == body.email for row in existing):
                raise Conflict("email")
            if existing:
                raise Conflict("username")

            # Argon2 salts each hash itself
            pw_hash = ph.hash(body.password)

            try:
                cur.execute(
                    f"""
                    INSERT INTO users (username, email, password_hash, first_name, last_name)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING {USER_COLUMNS};
                    """,
                    (body.username, body.email, pw_hash, body.first_name, body.last_name),
                )
            except psycopg2.errors.UniqueViolation as e:
                # Lost a race with a concurrent registration
                field = UNIQUE_CONSTRAINTS.get(getattr(e.diag, "constraint_name", None), "email")
                raise Conflict(field) from None
            user = cur.fetchone()

    logging.info(f"[Auth] Registered user {user['user_id']}")

    # Generate initial token for immediate login
    token = create_token(user["user_id"])

    return jsonify({
        "message": "User registered successfully",
        "token": token,
        "user": user_from_row(user, UserOut).to_json(),
    }), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: JSON with message, token and the public user object.
        400: Missing credentials, or invalid credentials (unknown email and
             wrong password are reported identically).
        500: Database error.
    """
    body = parse_body(LoginRequest)

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(
                f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE email = %s;",
                (body.email,),
            )
            user = cur.fetchone()

    if not user:
        raise InvalidCredentials()

    # Verify password against hash
    try:
        ph.verify(user["password_hash"], body.password)
    except (VerificationError, InvalidHashError):
        raise InvalidCredentials() from None

    token = create_token(user["user_id"])

    return jsonify({
        "message": "Login successful",
        "token": token,
        "user": user_from_row(user, UserOut).to_json(),
    }), 200


# --- GET CURRENT USER ---
@auth_bp.route("/me", methods=["GET"])
@login_required
def get_current_user() -> Tuple[Response, int]:
    """
    Retrieve the current user's full profile details.

    Requires Authorization header: Bearer <token>

    Returns:
        200: {"user": profile}
        401: Authentication failure.
    """
    return jsonify({"user": user_from_row(g.current_user, UserProfile).to_json()}), 200


# --- UPDATE CURRENT USER ---
@auth_bp.route("/profile", methods=["PUT"])
@login_required
def update_profile() -> Tuple[Response, int]:
    """
    Update specific fields of the current user's profile.

    Allowed fields:
    - firstName, lastName
    - bio, location
    - skills, interests
    - socialLinks
    - profilePicture

    A body containing any other field is rejected as a whole.

    Requires Authorization header: Bearer <token>

    Returns:
        200: {"message", "user"} with the updated profile.
        400: Disallowed field, invalid value, or no fields provided.
        401: Authentication failure.
        404: User disappeared between authentication and update.
    """
    updates = parse_body(ProfileUpdate)
    fields: Dict[str, Any] = updates.model_dump(exclude_unset=True)

    if not fields:
        raise ValidationError("No valid fields provided")

    if "social_links" in fields:
        # Replaces the whole object; omitted networks reset to ""
        fields["social_links"] = Json(updates.social_links.model_dump())

    set_clause = ", ".join(f"{PROFILE_COLUMNS[k]} = %s" for k in fields)
    set_clause += ", updated_at = CURRENT_TIMESTAMP"

    values = list(fields.values()) + [g.current_user["user_id"]]

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(
                f"UPDATE users SET {set_clause} WHERE user_id = %s RETURNING {USER_COLUMNS};",
                values,
            )
            updated_user = cur.fetchone()

    if not updated_user:
        raise NotFound("User not found")

    return jsonify({
        "message": "Profile updated successfully",
        "user": user_from_row(updated_user, UserProfile).to_json(),
    }), 200
