"""
Events service routes.
Handles event creation, listing and participation.
"""

import logging
from typing import Tuple

from flask import Blueprint, Response, g, jsonify, request
from psycopg2.extras import Json

from backend.auth_service.utils import login_required
from backend.database.db_connection import get_db
from backend.errors import InvalidIdentifier, NotFound
from backend.events_service import queries
from backend.events_service.participation import join_event, leave_event
from backend.schemas import EventCreate, ListEventsQuery, Pagination, event_from_row, parse_body, parse_query

events_bp = Blueprint("events", __name__)

# Largest value a PostgreSQL INTEGER id can hold
MAX_ID = 2_147_483_647


def parse_event_id(raw: str) -> int:
    """
    Turn the <event_id> path segment into an int.

    Raises:
        InvalidIdentifier: Not a positive integer within the id range.
    """
    if not (raw.isascii() and raw.isdigit()) or not 0 < int(raw) <= MAX_ID:
        raise InvalidIdentifier("Invalid event ID")
    return int(raw)


# --- REQUEST LOGGING ---
@events_bp.before_request
def before_request() -> None:
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Events] Response {response.status}")
    return response


@events_bp.route("/", methods=["GET"], strict_slashes=False)
def list_events() -> Tuple[Response, int]:
    """
    List events, filtered and paginated.

    Query params:
    - category: one of the event categories, or "all"
    - search: case-insensitive match on title, description and tags
    - page, limit: positive integers (defaults 1 and DEFAULT_PAGE_SIZE)
    - status: defaults to "published"

    Returns:
        200: {"events": [...], "pagination": {"current", "pages", "total"}}
        400: Unknown category or status.
    """
    query = parse_query(ListEventsQuery)

    with get_db() as conn:
        with conn.cursor() as cur:
            rows, pagination = queries.list_events(cur, query)

    return jsonify({
        "events": [event_from_row(r).to_json() for r in rows],
        "pagination": Pagination(**pagination).to_json(),
    }), 200


@events_bp.route("/<event_id>", methods=["GET"])
def get_event(event_id: str) -> Tuple[Response, int]:
    """
    Get a single event with organizer and participants populated.

    Returns:
        200: {"event": {...}}
        400: Malformed event id.
        404: Event not found.
    """
    eid = parse_event_id(event_id)

    with get_db() as conn:
        with conn.cursor() as cur:
            event = queries.get_event(cur, eid)
            if not event:
                raise NotFound("Event not found")
            participants = queries.get_participants(cur, event["participants"] or [])

    return jsonify({"event": event_from_row(event, participants).to_json()}), 200


@events_bp.route("/", methods=["POST"], strict_slashes=False)
@login_required
def create_event() -> Tuple[Response, int]:
    """
    Create an event organized by the caller.

    Validations:
    - title, description, category, date and time are required.
    - In-person events need address, city and state.
    - Virtual events need virtualLink.
    - maxParticipants, when given, is at least 1.

    Returns:
        201: {"message", "event"}
        400: Validation error.
        401: Authentication failure.
        500: Server error.
    """
    body = parse_body(EventCreate)
    organizer = g.current_user

    sql = """
        INSERT INTO events (
            title, description, category, date, time,
            location, is_virtual, virtual_link,
            organizer_id, max_participants, requirements, tags, status
        ) VALUES (
            %s, %s, %s, %s, %s,
            %s, %s, %s,
            %s, %s, %s, %s, 'published'
        )
        RETURNING *;
    """

    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, (
                body.title, body.description, body.category, body.date, body.time,
                Json(body.location.model_dump(by_alias=True, exclude_none=True)),
                body.is_virtual, body.virtual_link,
                organizer["user_id"], body.max_participants, body.requirements, body.tags,
            ))
            event = dict(cur.fetchone())

    logging.info(f"[Events] User {organizer['user_id']} created event {event['event_id']}")

    event.update({
        "organizer_username": organizer["username"],
        "organizer_first_name": organizer["first_name"],
        "organizer_last_name": organizer["last_name"],
        "organizer_profile_picture": organizer["profile_picture"],
        "organizer_bio": organizer["bio"],
    })

    return jsonify({
        "message": "Event created successfully",
        "event": event_from_row(event).to_json(),
    }), 201


@events_bp.route("/<event_id>/join", methods=["POST"])
@login_required
def join(event_id: str) -> Tuple[Response, int]:
    """
    Join an event as the current user.

    Returns:
        200: {"message"}
        400: Malformed id, already joined, or event full.
        401: Authentication failure.
        404: Event not found.
    """
    eid = parse_event_id(event_id)
    user_id = g.current_user["user_id"]

    with get_db() as conn:
        with conn.cursor() as cur:
            state = join_event(cur, eid, user_id)

    logging.info(f"[Events] User {user_id} joined event {eid} ({state['current_participants']} participants)")
    return jsonify({"message": "Successfully joined the event"}), 200


@events_bp.route("/<event_id>/leave", methods=["POST"])
@login_required
def leave(event_id: str) -> Tuple[Response, int]:
    """
    Leave an event the current user has joined.

    Returns:
        200: {"message"}
        400: Malformed id or not a participant.
        401: Authentication failure.
        404: Event not found.
    """
    eid = parse_event_id(event_id)
    user_id = g.current_user["user_id"]

    with get_db() as conn:
        with conn.cursor() as cur:
            state = leave_event(cur, eid, user_id)

    logging.info(f"[Events] User {user_id} left event {eid} ({state['current_participants']} participants)")
    return jsonify({"message": "Successfully left the event"}), 200


@events_bp.route("/user/organized", methods=["GET"])
@login_required
def organized_events() -> Tuple[Response, int]:
    """Events organized by the current user, newest first."""
    with get_db() as conn:
        with conn.cursor() as cur:
            rows = queries.list_organized(cur, g.current_user["user_id"])

    return jsonify({"events": [event_from_row(r).to_json() for r in rows]}), 200


@events_bp.route("/user/joined", methods=["GET"])
@login_required
def joined_events() -> Tuple[Response, int]:
    """Events the current user has joined, soonest first."""
    with get_db() as conn:
        with conn.cursor() as cur:
            rows = queries.list_joined(cur, g.current_user["user_id"])

    return jsonify({"events": [event_from_row(r).to_json() for r in rows]}), 200
