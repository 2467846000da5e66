"""
Central data model: periods (single lesson occurrences) and their elements.

A Period wraps one record of the WebUntis `getTimetable` response:
- one lesson on one calendar date
- immutable once built
- elements grouped into classes, teachers, subjects and rooms,
  each group sorted by element id
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Iterator, List, Literal, Optional, Tuple, Union

from untisplan import timeformat
from untisplan.errors import ValidationError


LessonType = Literal["lesson", "officeHour", "standby", "breakSupervision", "exam"]
LessonCode = Literal["regular", "cancelled", "irregular"]

_LESSON_TYPES: Dict[str, LessonType] = {
    "bs": "breakSupervision",
    "ex": "exam",
    "oh": "officeHour",
    "sb": "standby",
}

_LESSON_CODES: Dict[str, LessonCode] = {
    "cancelled": "cancelled",
    "irregular": "irregular",
}


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlainElement:
    """
    A teacher, room, subject or class attached to a period.
    """

    id: int
    name: str
    long_name: str

    def is_substituted(self) -> bool:
        return False


@dataclass(frozen=True)
class SubstitutedElement:
    """
    An element that replaces another one for a single period,
    e.g. a substitute teacher or a changed room.
    """

    id: int
    name: str
    long_name: str
    original_id: int
    original_name: str

    def is_substituted(self) -> bool:
        return True


Element = Union[PlainElement, SubstitutedElement]


def element_from_raw(record: Dict[str, Any]) -> Element:
    """
    Build an element from a raw WebUntis element record.

    The record is a substitution only if it carries both `orgid` and `orgname`.
    """
    orgid = record.get("orgid")
    orgname = record.get("orgname")
    if orgid is not None and orgname is not None:
        return SubstitutedElement(
            id=record["id"],
            name=record.get("name", ""),
            long_name=record.get("longname", ""),
            original_id=orgid,
            original_name=orgname,
        )
    return PlainElement(
        id=record["id"],
        name=record.get("name", ""),
        long_name=record.get("longname", ""),
    )


def _sorted_by_id(elements: Any) -> Tuple[Element, ...]:
    return tuple(sorted(elements, key=lambda e: e.id))


@dataclass(frozen=True)
class ElementCollection:
    """
    The elements of a period, grouped by type.
    Each group is stored as a tuple sorted by element id.
    """

    classes: Tuple[Element, ...] = ()
    teachers: Tuple[Element, ...] = ()
    subjects: Tuple[Element, ...] = ()
    rooms: Tuple[Element, ...] = ()

    def __post_init__(self) -> None:
        # frozen dataclass: normalize through object.__setattr__
        for name in ("classes", "teachers", "subjects", "rooms"):
            object.__setattr__(self, name, _sorted_by_id(getattr(self, name)))

    @classmethod
    def from_raw(cls, record: Dict[str, Any]) -> "ElementCollection":
        return cls(
            classes=[element_from_raw(e) for e in record.get("kl", [])],
            teachers=[element_from_raw(e) for e in record.get("te", [])],
            subjects=[element_from_raw(e) for e in record.get("su", [])],
            rooms=[element_from_raw(e) for e in record.get("ro", [])],
        )

    def all(self) -> Iterator[Element]:
        yield from self.classes
        yield from self.teachers
        yield from self.subjects
        yield from self.rooms

    def ids(self) -> Tuple[Tuple[int, ...], ...]:
        """Element ids per group, in the fixed order classes/teachers/subjects/rooms."""
        return tuple(
            tuple(e.id for e in group)
            for group in (self.classes, self.teachers, self.subjects, self.rooms)
        )


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Period:
    """
    One lesson occurrence on one date.

    `date` is stored as 'yyyy-mm-dd', `start_time` and `end_time` as 'hh:mm'.
    Building a Period with malformed values raises ValidationError.
    """

    id: int
    lesson_type: LessonType
    lesson_code: LessonCode
    lesson_number: int
    lesson_text: str
    substitution_text: Optional[str]
    activity_type: str
    student_group: Optional[str]
    date: str
    start_time: str
    end_time: str
    elements: ElementCollection = field(default_factory=ElementCollection)

    def __post_init__(self) -> None:
        timeformat.validate_date(self.date)
        timeformat.validate_time(self.start_time)
        timeformat.validate_time(self.end_time)
        # 'hh:mm' strings compare in chronological order
        if not self.start_time < self.end_time:
            raise ValidationError(
                f"Start time {self.start_time!r} is not before end time {self.end_time!r}"
            )

    @classmethod
    def from_raw(cls, record: Dict[str, Any]) -> "Period":
        """
        Build a Period from one record of the `getTimetable` response.
        """
        return cls(
            id=record["id"],
            lesson_type=_LESSON_TYPES.get(record.get("lstype", ""), "lesson"),
            lesson_code=_LESSON_CODES.get(record.get("code", ""), "regular"),
            lesson_number=record.get("lsnumber", 0),
            lesson_text=record.get("lstext", ""),
            substitution_text=record.get("substText") or None,
            activity_type=record.get("activityType", ""),
            student_group=record.get("sg") or None,
            elements=ElementCollection.from_raw(record),
            date=timeformat.format_untis_date(record["date"]),
            start_time=timeformat.format_untis_time(record["startTime"]),
            end_time=timeformat.format_untis_time(record["endTime"]),
        )

    # -- date / time accessors ---------------------------------------------

    def date_as_string(self) -> str:
        return self.date

    def date_as_object(self) -> date:
        return timeformat.parse_date(self.date)

    def start_time_as_string(self) -> str:
        return self.start_time

    def end_time_as_string(self) -> str:
        return self.end_time

    def start_datetime_as_string(self) -> str:
        return f"{self.date}T{self.start_time}"

    def end_datetime_as_string(self) -> str:
        return f"{self.date}T{self.end_time}"

    def start_datetime_as_object(self) -> datetime:
        return timeformat.combine(self.date, self.start_time)

    def end_datetime_as_object(self) -> datetime:
        return timeformat.combine(self.date, self.end_time)

    def weekday(self) -> int:
        """Monday is 0."""
        return self.date_as_object().weekday()

    def duration(self) -> timedelta:
        return self.end_datetime_as_object() - self.start_datetime_as_object()

    def schedule_key(self) -> Tuple[int, int, str, str]:
        """
        (lesson number, weekday, start, end): periods sharing this key
        belong to the same weekly schedule.
        """
        return (self.lesson_number, self.weekday(), self.start_time, self.end_time)

    # -- comparisons -------------------------------------------------------

    def has_same_elements_as(self, other: "Period") -> bool:
        """
        Compare element ids group by group. Groups are sorted,
        so comparing the id sequences is enough.
        """
        return self.elements.ids() == other.elements.ids()

    def deviates_from_schedule(self) -> bool:
        """
        A period deviates from its weekly schedule if it carries a substitution text,
        is not regular (cancelled/irregular) or has a substituted element.
        """
        return (
            self.substitution_text is not None
            or self.lesson_code != "regular"
            or any(e.is_substituted() for e in self.elements.all())
        )

    def belongs_to_same_schedule_as(self, other: "Period") -> bool:
        # weekday, not date: weekly recurrences share a schedule
        return self.schedule_key() == other.schedule_key()

    def can_be_combined_with(self, other: "Period") -> bool:
        """
        Two periods can be merged into one longer period if they share the
        lesson number and date, one starts when the other ends, and both have
        the same lesson code and elements.
        """
        return (
            self.lesson_number == other.lesson_number
            and self.date == other.date
            and (self.start_time == other.end_time or other.start_time == self.end_time)
            and self.lesson_code == other.lesson_code
            and self.has_same_elements_as(other)
        )

    def combine_with(self, other: "Period") -> "Period":
        """
        Merge with an adjacent period. Only valid after can_be_combined_with().

        The result is a copy of the earlier period that ends when the later one ends.
        """
        earlier, later = sorted((self, other), key=lambda p: p.start_datetime_as_object())
        return replace(earlier, end_time=later.end_time)


def sort_periods(periods: Iterable[Period]) -> List[Period]:
    """Chronological order: date, then start and end time."""
    return sorted(periods, key=lambda p: (p.date, p.start_time, p.end_time))
