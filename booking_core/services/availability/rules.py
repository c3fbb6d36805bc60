# ===== booking_core/services/availability/rules.py =====
"""
Pure availability rule evaluation.

Rules come in three variants. Precedence between them is decided here by
plain isinstance checks so the whole merge can be read (and tested) in one
place, with no database access:

    SpecificDate  >  DateRange  >  RecurringWeekly

Times are wall-clock ``datetime.time`` values for a single day and every
window is half-open ``[start, end)``.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from booking_core.core.errors import AmbiguousAvailabilityError, InvalidInputError


@dataclass(frozen=True, order=True)
class TimeWindow:
    start: time
    end: time

    def contains(self, other: "TimeWindow") -> bool:
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and other.start < self.end

    @property
    def duration_minutes(self) -> int:
        delta = datetime.combine(date.min, self.end) - datetime.combine(date.min, self.start)
        return int(delta.total_seconds() // 60)

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"


@dataclass(frozen=True, kw_only=True)
class RecurringWeekly:
    rule_id: str
    day_of_week: int  # 0=Monday, 6=Sunday
    window: Optional[TimeWindow] = None
    is_closed: bool = False
    priority: int = 0
    blocked: Tuple[TimeWindow, ...] = field(default_factory=tuple)


@dataclass(frozen=True, kw_only=True)
class DateRange:
    rule_id: str
    start_date: date
    end_date: date
    window: Optional[TimeWindow] = None
    is_closed: bool = False
    priority: int = 0
    blocked: Tuple[TimeWindow, ...] = field(default_factory=tuple)


@dataclass(frozen=True, kw_only=True)
class SpecificDate:
    rule_id: str
    specific_date: date
    window: Optional[TimeWindow] = None
    is_closed: bool = False
    priority: int = 0
    blocked: Tuple[TimeWindow, ...] = field(default_factory=tuple)


Rule = Union[RecurringWeekly, DateRange, SpecificDate]


def specificity(rule: Rule) -> int:
    if isinstance(rule, SpecificDate):
        return 3
    if isinstance(rule, DateRange):
        return 2
    return 1


def applies_on(rule: Rule, day: date) -> bool:
    if isinstance(rule, SpecificDate):
        return rule.specific_date == day
    if isinstance(rule, DateRange):
        return rule.start_date <= day <= rule.end_date
    return rule.day_of_week == day.weekday()


def applicable_rules(rules: Iterable[Rule], day: date) -> List[Rule]:
    return [rule for rule in rules if applies_on(rule, day)]


def select_open_windows(rules: Iterable[Rule], day: date) -> List[TimeWindow]:
    """
    Open intervals for ``day`` after precedence, before slotting.

    An empty list means closed. Closed is the default when nothing applies.
    """
    candidates = applicable_rules(rules, day)
    if not candidates:
        return []

    # A closed specific date wins over everything, including other specific dates
    if any(isinstance(rule, SpecificDate) and rule.is_closed for rule in candidates):
        return []

    top_tier = max(specificity(rule) for rule in candidates)
    tier = [rule for rule in candidates if specificity(rule) == top_tier]
    top_priority = max(rule.priority for rule in tier)
    winners = [rule for rule in tier if rule.priority == top_priority]

    closed = [rule for rule in winners if rule.is_closed]
    if closed:
        if len(closed) != len(winners):
            raise AmbiguousAvailabilityError(
                f"Rules {_ids(winners)} disagree on whether {day} is open "
                f"(same specificity, priority {top_priority})"
            )
        return []

    ordered = sorted(winners, key=lambda rule: rule.window)
    for previous, current in zip(ordered, ordered[1:]):
        if previous.window.overlaps(current.window):
            raise AmbiguousAvailabilityError(
                f"Rules {previous.rule_id} ({previous.window}) and {current.rule_id} "
                f"({current.window}) overlap on {day} with equal specificity and priority"
            )

    windows: List[TimeWindow] = []
    for rule in ordered:
        windows.extend(subtract_blocked(rule.window, rule.blocked))
    return sorted(windows)


def subtract_blocked(window: TimeWindow, blocked: Sequence[TimeWindow]) -> List[TimeWindow]:
    """Cut blocked windows out of ``window``."""
    pieces = [window]
    for block in sorted(blocked):
        remaining = []
        for piece in pieces:
            if not piece.overlaps(block):
                remaining.append(piece)
                continue
            if piece.start < block.start:
                remaining.append(TimeWindow(piece.start, block.start))
            if block.end < piece.end:
                remaining.append(TimeWindow(block.end, piece.end))
        pieces = remaining
    return pieces


def partition(windows: Iterable[TimeWindow], slot_minutes: int, buffer_minutes: int = 0) -> List[TimeWindow]:
    """Cut open windows into fixed-size slots; a trailing partial slot is dropped."""
    if slot_minutes <= 0:
        raise InvalidInputError("slot_minutes must be positive")

    slot = timedelta(minutes=slot_minutes)
    step = timedelta(minutes=slot_minutes + max(buffer_minutes, 0))
    slots: List[TimeWindow] = []

    for window in sorted(windows):
        current = datetime.combine(date.min, window.start)
        window_end = datetime.combine(date.min, window.end)

        while current + slot <= window_end:
            slots.append(TimeWindow(current.time(), (current + slot).time()))
            current += step

    return slots


def resolve_slots(
        rules: Iterable[Rule],
        day: date,
        slot_minutes: int,
        buffer_minutes: int = 0
) -> List[TimeWindow]:
    """Precedence + partition: the bookable slots for ``day``."""
    return partition(select_open_windows(rules, day), slot_minutes, buffer_minutes)


def _ids(rules: Iterable[Rule]) -> str:
    return ", ".join(str(rule.rule_id) for rule in rules)
