"""
Schedule reconstruction.

WebUntis returns every lesson occurrence separately. This module rebuilds the
weekly schedules behind them:

1. ScheduleCollection.from_lessons() groups periods that share lesson number,
   weekday, start and end time into one Schedule.
2. ScheduleCollection.combine_sequential_schedules() merges schedules that are
   really one longer lesson (e.g. a double period split into two slots).

Every period of a schedule is classified as "unchanged" (matches the
schedule's first period) or "changed" (cancelled, substituted, different
elements or code).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from untisplan.model import Period

log = logging.getLogger(__name__)


def _matches_reference(period: Period, reference: Period) -> bool:
    return (
        not period.deviates_from_schedule()
        and period.lesson_code == reference.lesson_code
        and period.has_same_elements_as(reference)
    )


@dataclass(frozen=True)
class Schedule:
    """
    Periods that represent the same recurring lesson slot.

    `periods` holds all of them in chronological order,
    `unchanged` and `changed` partition them. `reference` is the period
    the others were compared against.
    """

    periods: Tuple[Period, ...]
    unchanged: Tuple[Period, ...]
    changed: Tuple[Period, ...]
    reference: Period

    @classmethod
    def classify(
        cls,
        periods: Sequence[Period],
        reference: Optional[Period] = None,
        forced_changed: Iterable[Period] = (),
    ) -> "Schedule":
        """
        Build a schedule and split its periods into unchanged / changed.

        `reference` defaults to the first period. Periods listed in
        `forced_changed` are marked changed whatever their content.
        Raises ValueError for an empty sequence.
        """
        if not periods:
            raise ValueError("A schedule needs at least one period")
        if reference is None:
            reference = periods[0]
        forced = {id(p) for p in forced_changed}

        unchanged: List[Period] = []
        changed: List[Period] = []
        for p in periods:
            if id(p) not in forced and _matches_reference(p, reference):
                unchanged.append(p)
            else:
                changed.append(p)

        return cls(
            periods=tuple(periods),
            unchanged=tuple(unchanged),
            changed=tuple(changed),
            reference=reference,
        )

    def __len__(self) -> int:
        return len(self.periods)

    @property
    def lesson_number(self) -> int:
        return self.reference.lesson_number

    @property
    def weekday(self) -> int:
        return self.reference.weekday()

    @property
    def start_time(self) -> str:
        return self.reference.start_time

    @property
    def end_time(self) -> str:
        return self.reference.end_time

    def periods_by_date(self) -> Dict[str, List[Period]]:
        out: Dict[str, List[Period]] = {}
        for p in self.periods:
            out.setdefault(p.date, []).append(p)
        return out


def _combine_schedules(first: Schedule, second: Schedule) -> Optional[Schedule]:
    """
    Merge two schedules whose periods sit back to back on the same dates.

    Returns None if no date pairing can be combined. Pairings that cannot be
    combined (and dates only one schedule has) are kept as separate periods
    and marked changed.
    """
    by_date_first = first.periods_by_date()
    by_date_second = second.periods_by_date()

    merged: List[Period] = []
    leftovers: List[Period] = []
    reference: Optional[Period] = None

    for day in sorted(set(by_date_first) | set(by_date_second)):
        a_list = by_date_first.get(day, [])
        b_list = by_date_second.get(day, [])

        if len(a_list) == 1 and len(b_list) == 1 and a_list[0].can_be_combined_with(b_list[0]):
            combined = a_list[0].combine_with(b_list[0])
            merged.append(combined)
            if reference is None:
                reference = combined
        else:
            leftovers.extend(a_list)
            leftovers.extend(b_list)

    if reference is None:
        return None

    periods = sorted(merged + leftovers, key=lambda p: (p.start_datetime_as_object(), p.end_time))
    return Schedule.classify(periods, reference=reference, forced_changed=leftovers)


@dataclass(frozen=True)
class ScheduleCollection:
    schedules: Tuple[Schedule, ...] = ()

    def __len__(self) -> int:
        return len(self.schedules)

    def __iter__(self):
        return iter(self.schedules)

    @classmethod
    def from_lessons(cls, periods: Iterable[Period]) -> "ScheduleCollection":
        """
        Group periods into schedules by (lesson number, weekday, start, end).

        Periods are expected in chronological order. Groups keep the order in
        which their first period appeared; periods keep their input order.
        """
        groups: Dict[Tuple[int, int, str, str], List[Period]] = {}
        for p in periods:
            groups.setdefault(p.schedule_key(), []).append(p)

        schedules = tuple(Schedule.classify(group) for group in groups.values())
        log.debug("Grouped periods into %d schedules", len(schedules))
        return cls(schedules)

    def combine_sequential_schedules(self) -> "ScheduleCollection":
        """
        Merge schedules that form one longer lesson (double periods etc.).

        Each schedule is tried against the schedules already emitted, nearest
        first. A merged schedule is tried again, so three or more back-to-back
        slots end up in one schedule and a second call changes nothing.
        Returns a new collection.
        """
        out: List[Schedule] = []
        for schedule in self.schedules:
            pending = schedule
            position = len(out)
            i = len(out) - 1
            while i >= 0:
                combined = _combine_schedules(out[i], pending)
                if combined is None:
                    i -= 1
                    continue
                # merged schedule takes the place of its earliest part
                del out[i]
                pending = combined
                position = min(position, i)
                i = len(out) - 1
            out.insert(position, pending)

        if len(out) != len(self.schedules):
            log.debug("Combined %d schedules into %d", len(self.schedules), len(out))
        return ScheduleCollection(tuple(out))
