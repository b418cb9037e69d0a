from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import TYPE_CHECKING, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.user_token import UserToken
from app.scheduling.time_slots import TimeSlot, slot_window
from app.services.errors import CalendarMirrorError
from app.services.google_calendar import GoogleCalendarApiError, GoogleCalendarClient

if TYPE_CHECKING:
    from app.services.candidate_store import CandidateStore

logger = logging.getLogger(__name__)


class CalendarMirror:
    """
    Mirrors confirmed candidates into users' Google calendars.

    Each call resolves the user's stored credential first. When a refresh
    token is on file a fresh access token is requested and persisted; if that
    fails the stored (possibly stale) token is used and the API call is left
    to fail on its own.
    """

    def __init__(self, db: Session, client: GoogleCalendarClient, time_zone: str):
        self.db = db
        self.client = client
        self.time_zone = time_zone

    # ---------- credentials ----------
    def _access_token(self, user_id: str) -> str:
        token = self.db.get(UserToken, user_id)
        if not token or not token.access_token:
            raise CalendarMirrorError(f"No calendar credential on file for user {user_id}")

        access_token = token.access_token
        if token.refresh_token:
            try:
                access_token = self.client.refresh_credential(token.refresh_token)
            except GoogleCalendarApiError as e:
                logger.warning("Token refresh failed for user %s, using stored token: %s", user_id, e)
                return token.access_token

            token.access_token = access_token
            token.updated_at = datetime.now(timezone.utc)
            try:
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception("Failed to persist refreshed token for user %s", user_id)
        return access_token

    # ---------- operations ----------
    def add_event(
        self,
        user_id: str,
        day: date,
        time_slot: TimeSlot,
        title: str,
        description: str,
    ) -> str:
        access_token = self._access_token(user_id)
        start, end = slot_window(day, time_slot, self.time_zone)
        body = {
            "summary": title,
            "description": description,
            "start": {"dateTime": start.isoformat(), "timeZone": self.time_zone},
            "end": {"dateTime": end.isoformat(), "timeZone": self.time_zone},
        }
        try:
            event_id = self.client.insert_event(access_token, body)
        except GoogleCalendarApiError as e:
            raise CalendarMirrorError(_describe(e, "add event"), e.status_code) from e

        logger.info("Calendar event %s created for user %s (%s %s)", event_id, user_id, day, time_slot.value)
        return event_id

    def delete_event(self, user_id: str, event_id: str) -> None:
        """Delete an event; an event that is already gone counts as deleted."""
        access_token = self._access_token(user_id)
        try:
            self.client.delete_event(access_token, event_id)
        except GoogleCalendarApiError as e:
            if e.is_gone:
                logger.info("Calendar event %s already gone for user %s", event_id, user_id)
                return
            raise CalendarMirrorError(_describe(e, "delete event"), e.status_code) from e

        logger.info("Calendar event %s deleted for user %s", event_id, user_id)

    def event_exists(self, user_id: str, event_id: str) -> Optional[bool]:
        """True/False when the calendar answered, None when it could not be asked."""
        try:
            access_token = self._access_token(user_id)
            self.client.get_event(access_token, event_id)
        except GoogleCalendarApiError as e:
            if e.is_gone:
                return False
            logger.warning("Could not probe event %s for user %s: %s", event_id, user_id, e)
            return None
        except CalendarMirrorError as e:
            logger.warning("Could not probe event %s for user %s: %s", event_id, user_id, e)
            return None
        return True

    def list_events(self, user_id: str, start_date: date, end_date: date) -> list[dict]:
        access_token = self._access_token(user_id)
        tz = ZoneInfo(self.time_zone)
        time_min = datetime.combine(start_date, time(0, 0), tzinfo=tz).isoformat()
        time_max = datetime.combine(end_date, time(23, 59, 59), tzinfo=tz).isoformat()
        try:
            return self.client.list_events(access_token, time_min, time_max)
        except GoogleCalendarApiError as e:
            raise CalendarMirrorError(_describe(e, "list events"), e.status_code) from e

    def reconcile_deleted_externally(
        self,
        store: "CandidateStore",
        fallback_admin_id: Optional[str] = None,
    ) -> list[str]:
        """
        Treat an event deleted directly in either calendar as a cancellation.

        For every confirmed candidate with mirrored events: if the instructor's
        or the admin's event is gone, delete the other side's event and remove
        the candidate locally. Returns the removed candidate ids.
        """
        removed: list[str] = []

        for c in store.list_confirmed_with_event_ids():
            admin_user_id = c.admin_calendar_user_id or fallback_admin_id

            gone_from_instructor = False
            gone_from_admin = False

            if c.google_calendar_event_id:
                gone_from_instructor = self.event_exists(c.instructor_id, c.google_calendar_event_id) is False

            if not gone_from_instructor and c.admin_google_calendar_event_id and admin_user_id:
                gone_from_admin = self.event_exists(admin_user_id, c.admin_google_calendar_event_id) is False

            if not (gone_from_instructor or gone_from_admin):
                continue

            try:
                if gone_from_instructor and c.admin_google_calendar_event_id and admin_user_id:
                    self.delete_event(admin_user_id, c.admin_google_calendar_event_id)
                if gone_from_admin and c.google_calendar_event_id:
                    self.delete_event(c.instructor_id, c.google_calendar_event_id)
            except CalendarMirrorError as e:
                # the other side stays stale; the local record still follows the deletion
                logger.warning("Could not remove counterpart event for candidate %s: %s", c.id, e.message)

            if store.remove(c.id):
                logger.warning(
                    "Candidate %s removed: its calendar event was deleted externally (%s)",
                    c.id,
                    "instructor" if gone_from_instructor else "admin",
                )
                removed.append(c.id)

        return removed


def _describe(e: GoogleCalendarApiError, action: str) -> str:
    if e.status_code in (401, 403):
        return f"Calendar access denied while trying to {action}; the user needs to sign in again"
    if e.status_code is None:
        return f"Could not reach the calendar to {action}: {e.message}"
    return f"Failed to {action} (HTTP {e.status_code})"
