"""
Unit tests for schedule reconstruction.

- from_lessons(): weekly occurrences of one slot form one schedule
- combine_sequential_schedules(): back-to-back slots become one schedule,
  pairings that cannot be combined stay separate and count as "changed"
"""

from __future__ import annotations

import unittest

from untisplan.model import ElementCollection, Period, PlainElement
from untisplan.schedule import Schedule, ScheduleCollection


def make_period(
    id: int,
    day: str,
    start: str,
    end: str,
    code: str = "regular",
    lesson_number: int = 1,
    teachers: tuple = (),
) -> Period:
    return Period(
        id=id,
        lesson_type="lesson",
        lesson_code=code,
        lesson_number=lesson_number,
        lesson_text="",
        substitution_text=None,
        activity_type="Unterricht",
        student_group="1",
        date=day,
        start_time=start,
        end_time=end,
        elements=ElementCollection(teachers=[PlainElement(t, str(t), str(t)) for t in teachers]),
    )


WEEKLY_LESSONS = [
    make_period(1, "2022-04-20", "12:00", "13:00"),
    make_period(2, "2022-04-27", "12:00", "13:00"),
]

COMBINABLE_SCHEDULES = [
    make_period(1, "2022-04-20", "12:00", "13:00"),
    make_period(2, "2022-04-20", "13:00", "14:00"),
]

WEEKLY_DOUBLE_PERIODS = [
    make_period(1, "2022-04-20", "12:00", "13:00"),
    make_period(2, "2022-04-20", "13:00", "14:00"),
    make_period(3, "2022-04-27", "12:00", "13:00"),
    make_period(4, "2022-04-27", "13:00", "14:00"),
]

PARTIALLY_DIFFERENT_OCCURRENCE = [
    make_period(1, "2022-04-20", "12:00", "13:00"),
    make_period(2, "2022-04-20", "13:00", "14:00"),
    make_period(3, "2022-04-27", "12:00", "13:00"),
    make_period(4, "2022-04-27", "13:00", "14:00", code="cancelled"),
]

PARTIALLY_DIFFERENT_OCCURRENCE_ELEMENTS = [
    make_period(1, "2022-04-20", "12:00", "13:00"),
    make_period(2, "2022-04-20", "13:00", "14:00"),
    make_period(3, "2022-04-27", "12:00", "13:00", teachers=(1,)),
    make_period(4, "2022-04-27", "13:00", "14:00", teachers=(2,)),
]


class TestFromLessons(unittest.TestCase):
    def test_weekly_lessons_form_one_schedule(self) -> None:
        schedules = ScheduleCollection.from_lessons(WEEKLY_LESSONS).schedules

        self.assertEqual(len(schedules), 1)
        self.assertEqual(len(schedules[0].unchanged), 2)
        self.assertEqual(len(schedules[0].changed), 0)
        self.assertEqual([p.id for p in schedules[0].periods], [1, 2])

    def test_same_slot_keeps_input_order(self) -> None:
        periods = [make_period(i, f"2022-05-{d:02d}", "08:00", "08:45") for i, d in enumerate((2, 9, 16, 23), 1)]
        schedules = ScheduleCollection.from_lessons(periods).schedules

        self.assertEqual(len(schedules), 1)
        self.assertEqual([p.id for p in schedules[0].periods], [1, 2, 3, 4])

    def test_different_slots_form_separate_schedules_in_first_seen_order(self) -> None:
        periods = [
            make_period(1, "2022-04-20", "08:00", "08:45", lesson_number=5),
            make_period(2, "2022-04-20", "08:00", "08:45", lesson_number=7),
            make_period(3, "2022-04-21", "08:00", "08:45", lesson_number=5),
            make_period(4, "2022-04-27", "08:00", "08:45", lesson_number=5),
        ]
        schedules = ScheduleCollection.from_lessons(periods).schedules

        self.assertEqual([[p.id for p in s.periods] for s in schedules], [[1, 4], [2], [3]])

    def test_deviating_occurrences_are_changed(self) -> None:
        periods = [
            make_period(1, "2022-04-20", "12:00", "13:00", teachers=(1,)),
            make_period(2, "2022-04-27", "12:00", "13:00", code="cancelled", teachers=(1,)),
            make_period(3, "2022-05-04", "12:00", "13:00", teachers=(2,)),
            make_period(4, "2022-05-11", "12:00", "13:00", teachers=(1,)),
        ]
        schedule = ScheduleCollection.from_lessons(periods).schedules[0]

        self.assertEqual([p.id for p in schedule.unchanged], [1, 4])
        self.assertEqual([p.id for p in schedule.changed], [2, 3])
        self.assertEqual(schedule.reference.id, 1)

    def test_deviating_reference_is_changed(self) -> None:
        periods = [
            make_period(1, "2022-04-20", "12:00", "13:00", code="irregular"),
            make_period(2, "2022-04-27", "12:00", "13:00"),
        ]
        schedule = ScheduleCollection.from_lessons(periods).schedules[0]

        # both differ from the (irregular) reference
        self.assertEqual(len(schedule.unchanged), 0)
        self.assertEqual(len(schedule.changed), 2)

    def test_empty_input(self) -> None:
        self.assertEqual(len(ScheduleCollection.from_lessons([])), 0)


class TestCombineSequentialSchedules(unittest.TestCase):
    def test_combines_sequential_schedules(self) -> None:
        collection = ScheduleCollection.from_lessons(COMBINABLE_SCHEDULES)
        self.assertEqual(len(collection), 2)

        schedules = collection.combine_sequential_schedules().schedules
        self.assertEqual(len(schedules), 1)
        self.assertEqual(schedules[0].start_time, "12:00")
        self.assertEqual(schedules[0].end_time, "14:00")

    def test_weekly_double_periods_have_no_changes(self) -> None:
        schedules = ScheduleCollection.from_lessons(WEEKLY_DOUBLE_PERIODS).combine_sequential_schedules().schedules

        self.assertEqual(len(schedules), 1)
        self.assertEqual(len(schedules[0].periods), 2)
        self.assertEqual(len(schedules[0].changed), 0)
        self.assertEqual([(p.date, p.start_time, p.end_time) for p in schedules[0].unchanged], [
            ("2022-04-20", "12:00", "14:00"),
            ("2022-04-27", "12:00", "14:00"),
        ])

    def test_partially_combinable_because_of_code(self) -> None:
        schedules = ScheduleCollection.from_lessons(
            PARTIALLY_DIFFERENT_OCCURRENCE
        ).combine_sequential_schedules().schedules

        self.assertEqual(len(schedules), 1)
        self.assertEqual(len(schedules[0].periods), 3)
        self.assertEqual(sorted(p.id for p in schedules[0].changed), [3, 4])

    def test_partially_combinable_because_of_elements(self) -> None:
        schedules = ScheduleCollection.from_lessons(
            PARTIALLY_DIFFERENT_OCCURRENCE_ELEMENTS
        ).combine_sequential_schedules().schedules

        self.assertEqual(len(schedules), 1)
        self.assertEqual(sorted(p.id for p in schedules[0].changed), [3, 4])

    def test_reference_is_first_combined_pairing(self) -> None:
        periods = [
            make_period(1, "2022-04-20", "12:00", "13:00"),
            make_period(2, "2022-04-20", "13:00", "14:00", code="cancelled"),
            make_period(3, "2022-04-27", "12:00", "13:00"),
            make_period(4, "2022-04-27", "13:00", "14:00"),
        ]
        schedule = ScheduleCollection.from_lessons(periods).combine_sequential_schedules().schedules[0]

        self.assertEqual(schedule.reference.id, 3)
        self.assertEqual(schedule.reference.end_time, "14:00")
        self.assertEqual(sorted(p.id for p in schedule.changed), [1, 2])
        self.assertEqual([p.id for p in schedule.unchanged], [3])
        # chronological order
        self.assertEqual([p.id for p in schedule.periods], [1, 2, 3])

    def test_triple_period_becomes_one_schedule(self) -> None:
        periods = [
            make_period(1, "2022-04-20", "08:00", "08:45"),
            make_period(2, "2022-04-20", "08:45", "09:30"),
            make_period(3, "2022-04-20", "09:30", "10:15"),
        ]
        schedules = ScheduleCollection.from_lessons(periods).combine_sequential_schedules().schedules

        self.assertEqual(len(schedules), 1)
        self.assertEqual(schedules[0].start_time, "08:00")
        self.assertEqual(schedules[0].end_time, "10:15")

    def test_parallel_lessons_are_combined_separately(self) -> None:
        periods = [
            make_period(1, "2022-04-20", "08:00", "08:45", lesson_number=5),
            make_period(2, "2022-04-20", "08:00", "08:45", lesson_number=7),
            make_period(3, "2022-04-20", "08:45", "09:30", lesson_number=5),
            make_period(4, "2022-04-20", "08:45", "09:30", lesson_number=7),
        ]
        schedules = ScheduleCollection.from_lessons(periods).combine_sequential_schedules().schedules

        self.assertEqual([(s.lesson_number, s.start_time, s.end_time) for s in schedules], [
            (5, "08:00", "09:30"),
            (7, "08:00", "09:30"),
        ])

    def test_unrelated_schedules_are_kept(self) -> None:
        periods = [
            make_period(1, "2022-04-20", "08:00", "08:45", lesson_number=1),
            make_period(2, "2022-04-20", "08:45", "09:30", lesson_number=2),
            make_period(3, "2022-04-20", "10:00", "10:45", lesson_number=1),
        ]
        collection = ScheduleCollection.from_lessons(periods)
        combined = collection.combine_sequential_schedules()

        self.assertEqual(combined, collection)

    def test_combining_is_idempotent(self) -> None:
        once = ScheduleCollection.from_lessons(PARTIALLY_DIFFERENT_OCCURRENCE).combine_sequential_schedules()
        twice = once.combine_sequential_schedules()

        self.assertEqual(twice, once)

    def test_returns_new_collection(self) -> None:
        collection = ScheduleCollection.from_lessons(COMBINABLE_SCHEDULES)
        combined = collection.combine_sequential_schedules()

        self.assertIsNot(combined, collection)
        self.assertEqual(len(collection), 2)


class TestSchedule(unittest.TestCase):
    def test_forced_changed(self) -> None:
        a = make_period(1, "2022-04-20", "12:00", "13:00")
        b = make_period(2, "2022-04-27", "12:00", "13:00")
        schedule = Schedule.classify([a, b], forced_changed=[b])

        self.assertEqual(schedule.unchanged, (a,))
        self.assertEqual(schedule.changed, (b,))
        self.assertEqual(len(schedule), 2)
        self.assertEqual(schedule.weekday, 2)

    def test_empty_periods_raise_value_error(self) -> None:
        with self.assertRaises(ValueError):
            Schedule.classify([])


if __name__ == "__main__":
    unittest.main()
