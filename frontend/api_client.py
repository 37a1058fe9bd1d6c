"""
HTTP client for the Social Serve API.

Every request carries the bearer token of the Session it was given.
Sign-in, sign-out and session restore go through the SessionStore so the
token survives restarts.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import requests

from frontend.session import Session, SessionStore

DEFAULT_API_URL = "http://localhost:8000/api"


class ApiClientError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, code: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code
        self.field = field


class ApiClient:
    def __init__(
        self,
        session: Session,
        store: Optional[SessionStore] = None,
        base_url: Optional[str] = None,
        http: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self.session = session
        self.store = store
        self.base_url = (base_url or os.getenv("SOCIAL_SERVE_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout

    # --- TRANSPORT ---
    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        headers = {**self.session.auth_headers(), **kwargs.pop("headers", {})}
        response = self.http.request(
            method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
        )

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not response.ok:
            raise ApiClientError(
                response.status_code,
                body.get("error") or f"Request failed with status {response.status_code}",
                code=body.get("code"),
                field=body.get("field"),
            )
        return body

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(self.session)

    def _sign_in(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self.session.sign_in(body["token"], body["user"])
        self._persist()
        return body["user"]

    # --- AUTH ---
    @classmethod
    def from_store(cls, store: SessionStore, **kwargs: Any) -> "ApiClient":
        """Build a client from the stored session and restore its user."""
        client = cls(store.load(), store=store, **kwargs)
        client.restore()
        return client

    def restore(self) -> Optional[Dict[str, Any]]:
        """
        Re-fetch the user for a loaded token.

        A token the server rejects is dropped from the session and the store.
        Other failures (network, 5xx) propagate and leave the token in place.
        """
        if not self.session.is_authenticated:
            return None
        try:
            self.session.user = self.me()
        except ApiClientError as e:
            if e.status_code != 401:
                raise
            logging.info("Stored token rejected, signing out")
            self.logout()
        return self.session.user

    def register(
        self,
        username: str,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"username": username, "email": email, "password": password}
        if first_name is not None:
            payload["firstName"] = first_name
        if last_name is not None:
            payload["lastName"] = last_name
        return self._sign_in(self._request("POST", "/auth/register", json=payload))

    def login(self, email: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._sign_in(body)

    def logout(self) -> None:
        self.session.sign_out()
        if self.store is not None:
            self.store.clear()

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")["user"]

    def update_profile(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Send camelCase profile changes; the cached user is replaced with the server's copy."""
        user = self._request("PUT", "/auth/profile", json=changes)["user"]
        self.session.update_user(user)
        return user

    # --- EVENTS ---
    def create_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/events", json=event)["event"]

    def list_events(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        return self._request("GET", "/events", params=params)

    def get_event(self, event_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/events/{event_id}")["event"]

    def join_event(self, event_id: int) -> str:
        return self._request("POST", f"/events/{event_id}/join")["message"]

    def leave_event(self, event_id: int) -> str:
        return self._request("POST", f"/events/{event_id}/leave")["message"]

    def organized_events(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/events/user/organized")["events"]

    def joined_events(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/events/user/joined")["events"]
