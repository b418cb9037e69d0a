"""
Google Calendar REST client.

Thin wrapper over the v3 events API and the OAuth token endpoint. Every
non-success response raises GoogleCalendarApiError carrying the HTTP status,
so callers can tell "gone" (404/410) from auth or transport failures.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"

GONE_STATUSES = (404, 410)


class GoogleCalendarApiError(Exception):
    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{status_code}] {message}")

    @property
    def is_gone(self) -> bool:
        return self.status_code in GONE_STATUSES


class GoogleCalendarClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        calendar_id: str = "primary",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.calendar_id = calendar_id
        self._http = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    # ---------- OAuth ----------
    def refresh_credential(self, refresh_token: str) -> str:
        response = self._send(
            "POST",
            GOOGLE_TOKEN_URL,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )
        access_token = _json(response).get("access_token")
        if not access_token:
            raise GoogleCalendarApiError(response.status_code, "No access token in refresh response")
        return access_token

    # ---------- events ----------
    def insert_event(self, access_token: str, event: dict[str, Any]) -> str:
        response = self._send(
            "POST",
            self._events_url(),
            headers=self._auth(access_token),
            json=event,
        )
        event_id = _json(response).get("id")
        if not event_id:
            raise GoogleCalendarApiError(response.status_code, "Calendar did not return an event id")
        return event_id

    def delete_event(self, access_token: str, event_id: str) -> None:
        self._send("DELETE", self._events_url(event_id), headers=self._auth(access_token))

    def get_event(self, access_token: str, event_id: str) -> dict[str, Any]:
        response = self._send("GET", self._events_url(event_id), headers=self._auth(access_token))
        return _json(response)

    def list_events(self, access_token: str, time_min: str, time_max: str) -> list[dict[str, Any]]:
        response = self._send(
            "GET",
            self._events_url(),
            headers=self._auth(access_token),
            params={
                "timeMin": time_min,
                "timeMax": time_max,
                "singleEvents": "true",
                "orderBy": "startTime",
            },
        )
        return _json(response).get("items") or []

    # ---------- helpers ----------
    def _events_url(self, event_id: Optional[str] = None) -> str:
        url = f"{GOOGLE_CALENDAR_API}/calendars/{self.calendar_id}/events"
        return f"{url}/{event_id}" if event_id else url

    @staticmethod
    def _auth(access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}

    def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GoogleCalendarApiError(None, f"Network error: {e}") from e

        if response.status_code >= 400:
            raise GoogleCalendarApiError(response.status_code, response.text[:500])
        return response


def _json(response: httpx.Response) -> dict[str, Any]:
    # proxies and captive portals answer 200 with HTML
    try:
        body = response.json()
    except ValueError as e:
        raise GoogleCalendarApiError(response.status_code, "Invalid JSON from calendar") from e
    if not isinstance(body, dict):
        raise GoogleCalendarApiError(response.status_code, "Unexpected calendar response")
    return body


def get_calendar_client():
    client = GoogleCalendarClient(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        calendar_id=settings.google_calendar_id,
        timeout=settings.http_timeout_seconds,
    )
    try:
        yield client
    finally:
        client.close()
