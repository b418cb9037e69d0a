"""Fixed catalog of nightly session slots and the time math around them."""

from __future__ import annotations

import enum
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo


class TimeSlot(str, enum.Enum):
    SLOT_A = "21:00-23:00"
    SLOT_B = "22:00-24:00"

    @property
    def start_hour(self) -> int:
        return int(self.value.split("-")[0].split(":")[0])

    @property
    def end_hour(self) -> int:
        # 24 means midnight at the end of the day
        return int(self.value.split("-")[1].split(":")[0])

    @property
    def label(self) -> str:
        return f"{self.start_hour}:00-{self.end_hour}:00"


def slot_window(day: date, slot: TimeSlot, tz_name: str) -> tuple[datetime, datetime]:
    """Return aware (start, end) datetimes for `slot` on `day` in `tz_name`.

    A slot ending at hour 24 ends at 00:00 of the following calendar day.
    """
    tz = ZoneInfo(tz_name)
    start = datetime.combine(day, time(slot.start_hour, 0), tzinfo=tz)
    if slot.end_hour == 24:
        end = datetime.combine(day + timedelta(days=1), time(0, 0), tzinfo=tz)
    else:
        end = datetime.combine(day, time(slot.end_hour, 0), tzinfo=tz)
    return start, end


def month_of(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


# ---------- busy-slot detection ----------
def _minutes(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute


def _parse_event_time(value: dict, tz: ZoneInfo) -> tuple[datetime | None, date | None]:
    if value.get("dateTime"):
        dt = datetime.fromisoformat(value["dateTime"].replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=tz)
        return dt.astimezone(tz), None
    if value.get("date"):
        return None, date.fromisoformat(value["date"])
    return None, None


def conflicting_slots(events: list[dict], tz_name: str) -> dict[date, set[TimeSlot]]:
    """
    Map calendar events (Google `start`/`end` shape) to the slots they block.

    - all-day events block both slots on every day from start up to (not incl.) end
    - timed events block a slot when start < slot_end and end > slot_start
    - an event that runs past midnight counts as ending at 24:00 on its start day
    """
    tz = ZoneInfo(tz_name)
    conflicts: dict[date, set[TimeSlot]] = {}

    for ev in events:
        start_dt, start_day = _parse_event_time(ev.get("start") or {}, tz)
        end_dt, end_day = _parse_event_time(ev.get("end") or {}, tz)

        if start_day is not None and start_dt is None:
            last = end_day or start_day
            cur = start_day
            while cur < last:
                conflicts.setdefault(cur, set()).update(TimeSlot)
                cur += timedelta(days=1)
            # single-day all-day events without an end
            if last == start_day:
                conflicts.setdefault(start_day, set()).update(TimeSlot)
            continue

        if start_dt is None:
            continue
        if end_dt is None:
            end_dt = start_dt

        start_m = _minutes(start_dt)
        end_m = 24 * 60 if end_dt.date() != start_dt.date() else _minutes(end_dt)

        hits = {
            slot
            for slot in TimeSlot
            if start_m < slot.end_hour * 60 and end_m > slot.start_hour * 60
        }
        if hits:
            conflicts.setdefault(start_dt.date(), set()).update(hits)

    return conflicts
