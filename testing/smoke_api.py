"""
Quick end-to-end check against a running gateway.
Tests: register, login, create event, list events, join, leave.

Usage:
    python -m backend.gateway.server   # in another terminal
    python testing/smoke_api.py [http://localhost:8000/api]
"""

import sys
import uuid

from frontend.api_client import ApiClient, ApiClientError
from frontend.session import Session


def main(base_url: str) -> None:
    suffix = uuid.uuid4().hex[:8]
    organizer = ApiClient(Session(), base_url=base_url)
    volunteer = ApiClient(Session(), base_url=base_url)

    # 1) Register two users
    user = organizer.register(f"org_{suffix}", f"org_{suffix}@example.com", "pass1234", "Test", "Organizer")
    print("REGISTER:", user)
    volunteer.register(f"vol_{suffix}", f"vol_{suffix}@example.com", "pass1234")

    # 2) Login with the same credentials
    print("LOGIN:", organizer.login(f"org_{suffix}@example.com", "pass1234"))

    # 3) Create a one-seat event
    event = organizer.create_event({
        "title": "Park Cleanup",
        "description": "Simple test",
        "category": "environmental",
        "date": "2030-10-20",
        "time": "10:00",
        "location": {"address": "1 Main St", "city": "Springfield", "state": "IL"},
        "maxParticipants": 1,
        "tags": ["Outdoors"],
    })
    print("CREATE EVENT:", event["id"], event["title"])

    # 4) List events
    listing = volunteer.list_events(category="environmental", search="cleanup")
    print("LIST EVENTS:", listing["pagination"])

    # 5) Join, fill, leave
    print("JOIN:", volunteer.join_event(event["id"]))
    try:
        organizer.join_event(event["id"])
    except ApiClientError as e:
        print("JOIN WHEN FULL:", e.status_code, e.code, e.message)
    print("LEAVE:", volunteer.leave_event(event["id"]))
    print("JOIN AFTER LEAVE:", organizer.join_event(event["id"]))
    print("EVENT:", organizer.get_event(event["id"])["currentParticipants"], "participant(s)")


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000/api")
