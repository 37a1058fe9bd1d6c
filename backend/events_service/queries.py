"""
Read-side SQL for events: filtered listing with pagination, per-user
listings and single-event lookup.
"""

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from backend.schemas import ListEventsQuery

# Event columns plus the organizer summary used to populate "organizer"
EVENT_SELECT = """
    SELECT
        e.*,
        u.username AS organizer_username,
        u.first_name AS organizer_first_name,
        u.last_name AS organizer_last_name,
        u.profile_picture AS organizer_profile_picture,
        u.bio AS organizer_bio
    FROM events e
    JOIN users u ON e.organizer_id = u.user_id
"""

PARTICIPANT_SQL = """
    SELECT user_id, username, first_name, last_name, profile_picture
    FROM users
    WHERE user_id = ANY(%s)
    ORDER BY array_position(%s, user_id);
"""


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_filters(query: ListEventsQuery) -> Tuple[str, List[Any]]:
    """
    Build the WHERE clause for a listing query.

    Returns:
        tuple: (sql fragment starting with WHERE, positional params)
    """
    conditions = ["e.status = %s"]
    params: List[Any] = [query.status]

    if query.category and query.category != "all":
        conditions.append("e.category = %s")
        params.append(query.category)

    if query.search:
        pattern = f"%{escape_like(query.search)}%"
        conditions.append(
            "(e.title ILIKE %s OR e.description ILIKE %s"
            " OR EXISTS (SELECT 1 FROM unnest(e.tags) AS tag WHERE tag ILIKE %s))"
        )
        params.extend([pattern, pattern, pattern])

    return "WHERE " + " AND ".join(conditions), params


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit)


def list_events(cur, query: ListEventsQuery) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """
    Return one page of matching events (ascending date) and its pagination block.
    """
    where, params = build_filters(query)

    cur.execute(f"SELECT COUNT(*) AS total FROM events e {where};", params)
    total = cur.fetchone()["total"]

    offset = (query.page - 1) * query.limit
    cur.execute(
        f"{EVENT_SELECT} {where} ORDER BY e.date ASC, e.event_id ASC LIMIT %s OFFSET %s;",
        params + [query.limit, offset],
    )
    rows = cur.fetchall()

    pagination = {
        "current": query.page,
        "pages": page_count(total, query.limit),
        "total": total,
    }
    return rows, pagination


def get_event(cur, event_id: int) -> Optional[Dict[str, Any]]:
    cur.execute(f"{EVENT_SELECT} WHERE e.event_id = %s;", (event_id,))
    return cur.fetchone()


def get_participants(cur, user_ids: Sequence[int]) -> List[Dict[str, Any]]:
    """User summaries for the given ids, in participants order."""
    if not user_ids:
        return []
    ids = list(user_ids)
    cur.execute(PARTICIPANT_SQL, (ids, ids))
    return cur.fetchall()


def list_organized(cur, user_id: int) -> List[Dict[str, Any]]:
    cur.execute(f"{EVENT_SELECT} WHERE e.organizer_id = %s ORDER BY e.created_at DESC;", (user_id,))
    return cur.fetchall()


def list_joined(cur, user_id: int) -> List[Dict[str, Any]]:
    cur.execute(f"{EVENT_SELECT} WHERE %s = ANY(e.participants) ORDER BY e.date ASC;", (user_id,))
    return cur.fetchall()
