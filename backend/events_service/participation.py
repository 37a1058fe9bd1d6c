"""
Join / leave logic for event participation.

Each operation is a single conditional UPDATE: the membership and capacity
checks live in the WHERE clause, so the check, the array change and the
counter change happen together under the row lock. Two concurrent joins on
the last free seat cannot both succeed; PostgreSQL re-evaluates the WHERE
clause of the second UPDATE against the row the first one committed.

When the UPDATE matches nothing, the event is re-read only to tell the
caller why.
"""

from typing import Any, Dict

from backend.errors import AlreadyJoined, EventFull, NotFound, NotJoined

JOIN_SQL = """
    UPDATE events
    SET participants = array_append(participants, %(user_id)s),
        current_participants = current_participants + 1,
        updated_at = CURRENT_TIMESTAMP
    WHERE event_id = %(event_id)s
      AND NOT (%(user_id)s = ANY(participants))
      AND (max_participants IS NULL OR current_participants < max_participants)
    RETURNING event_id, current_participants, max_participants;
"""

LEAVE_SQL = """
    UPDATE events
    SET participants = array_remove(participants, %(user_id)s),
        current_participants = current_participants - 1,
        updated_at = CURRENT_TIMESTAMP
    WHERE event_id = %(event_id)s
      AND %(user_id)s = ANY(participants)
    RETURNING event_id, current_participants, max_participants;
"""

STATE_SQL = """
    SELECT participants, current_participants, max_participants
    FROM events
    WHERE event_id = %s;
"""


def _current_state(cur, event_id: int) -> Dict[str, Any]:
    cur.execute(STATE_SQL, (event_id,))
    state = cur.fetchone()
    if not state:
        raise NotFound("Event not found")
    return state


def join_event(cur, event_id: int, user_id: int) -> Dict[str, Any]:
    """
    Add user_id to the event's participants.

    Args:
        cur: Open cursor; the caller owns the transaction.
        event_id (int): Event to join.
        user_id (int): Joining user.

    Returns:
        dict: event_id, current_participants and max_participants after the join.

    Raises:
        NotFound: The event does not exist.
        AlreadyJoined: user_id is already a participant (joins are not idempotent).
        EventFull: max_participants is set and reached.
    """
    params = {"event_id": event_id, "user_id": user_id}
    cur.execute(JOIN_SQL, params)
    updated = cur.fetchone()
    if updated:
        return updated

    state = _current_state(cur, event_id)
    if user_id in (state["participants"] or []):
        raise AlreadyJoined()
    # Not a member, so the capacity condition is what failed
    raise EventFull()


def leave_event(cur, event_id: int, user_id: int) -> Dict[str, Any]:
    """
    Remove user_id from the event's participants.

    Raises:
        NotFound: The event does not exist.
        NotJoined: user_id is not a participant.
    """
    params = {"event_id": event_id, "user_id": user_id}
    cur.execute(LEAVE_SQL, params)
    updated = cur.fetchone()
    if updated:
        return updated

    _current_state(cur, event_id)
    raise NotJoined()
