"""
Slot-sharing rule: at most two confirmed candidates per (date, time_slot).

This is the only implementation of the rule; single and batch confirmation
both go through it.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence

from app.schemas.candidates import Candidate
from app.scheduling.time_slots import TimeSlot

SLOT_CAPACITY = 2


@dataclass(frozen=True)
class SlotViolation:
    date: date
    time_slot: TimeSlot
    existing_count: int
    batch_count: int
    candidate_ids: tuple[str, ...]
    reason: str

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "time_slot": self.time_slot.value,
            "existing_count": self.existing_count,
            "batch_count": self.batch_count,
            "candidate_ids": list(self.candidate_ids),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class CapacityDecision:
    violations: list[SlotViolation] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return not self.violations


def _count_confirmed(
    existing_confirmed: Iterable[Candidate],
    slot_key: tuple[date, TimeSlot],
    exclude_ids: set[str],
) -> int:
    return sum(
        1
        for c in existing_confirmed
        if c.slot_key == slot_key and c.id not in exclude_ids
    )


def can_confirm(candidate: Candidate, existing_confirmed: Sequence[Candidate]) -> CapacityDecision:
    """Reject when the slot already holds SLOT_CAPACITY confirmed candidates (the candidate itself excluded)."""
    existing = _count_confirmed(existing_confirmed, candidate.slot_key, {candidate.id})
    if existing >= SLOT_CAPACITY:
        return CapacityDecision(
            violations=[
                SlotViolation(
                    date=candidate.date,
                    time_slot=candidate.time_slot,
                    existing_count=existing,
                    batch_count=1,
                    candidate_ids=(candidate.id,),
                    reason=(
                        f"{candidate.date.isoformat()} {candidate.time_slot.label} "
                        f"({candidate.instructor_name}): slot already has {existing} confirmed sessions"
                    ),
                )
            ]
        )
    return CapacityDecision()


def can_confirm_batch(
    candidates: Sequence[Candidate],
    existing_confirmed: Sequence[Candidate],
) -> CapacityDecision:
    """
    Validate a whole batch against one snapshot of confirmed state.

    a) every member individually, against existing state only
    b) per (date, time_slot) group of members:
       existing (batch members excluded) + members in group must stay below SLOT_CAPACITY + 1
    """
    violations: list[SlotViolation] = []

    for c in candidates:
        violations.extend(can_confirm(c, existing_confirmed).violations)

    batch_ids = {c.id for c in candidates}
    in_batch = Counter(c.slot_key for c in candidates)
    already_flagged = {(v.date, v.time_slot) for v in violations}

    # keep the order in which slots first appear in the batch
    for key in dict.fromkeys(c.slot_key for c in candidates):
        existing = _count_confirmed(existing_confirmed, key, batch_ids)
        total = existing + in_batch[key]
        if total > SLOT_CAPACITY and key not in already_flagged:
            day, slot = key
            violations.append(
                SlotViolation(
                    date=day,
                    time_slot=slot,
                    existing_count=existing,
                    batch_count=in_batch[key],
                    candidate_ids=tuple(c.id for c in candidates if c.slot_key == key),
                    reason=(
                        f"{day.isoformat()} {slot.label}: {existing} confirmed + "
                        f"{in_batch[key]} selected would make {total} (max {SLOT_CAPACITY})"
                    ),
                )
            )

    return CapacityDecision(violations=violations)
