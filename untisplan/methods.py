"""
Named WebUntis remote calls.

Each function takes an RPCClient and returns the decoded result.
Payload shapes are not validated here beyond "a list call returns a list".
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List

from untisplan.model import Period, sort_periods
from untisplan.rpc import RPCClient
from untisplan.timeformat import to_untis_date


# element types accepted by getTimetable
CLASS = 1
TEACHER = 2
SUBJECT = 3
ROOM = 4
STUDENT = 5

ELEMENT_TYPES = {
    "class": CLASS,
    "teacher": TEACHER,
    "subject": SUBJECT,
    "room": ROOM,
    "student": STUDENT,
}

_ELEMENT_FIELDS = ["id", "name", "longname", "externalkey"]


def _list_result(client: RPCClient, method: str, params: Any = None) -> List[Dict[str, Any]]:
    result = client.request(method, params)
    if not isinstance(result, list):
        raise TypeError(f"{method}: expected a list, got {type(result).__name__}")
    return result


def get_classes(client: RPCClient) -> List[Dict[str, Any]]:
    return _list_result(client, "getKlassen")


def get_subjects(client: RPCClient) -> List[Dict[str, Any]]:
    return _list_result(client, "getSubjects")


def get_rooms(client: RPCClient) -> List[Dict[str, Any]]:
    return _list_result(client, "getRooms")


def get_teachers(client: RPCClient) -> List[Dict[str, Any]]:
    return _list_result(client, "getTeachers")


def fetch_timetable(
    client: RPCClient,
    element_type: int,
    element_id: int,
    start: date,
    end: date,
) -> List[Dict[str, Any]]:
    """
    Fetch the raw period records of one element (class, teacher, ...)
    between start and end (both inclusive).
    """
    params = {
        "options": {
            "element": {"id": element_id, "type": element_type},
            "startDate": to_untis_date(start),
            "endDate": to_untis_date(end),
            "showLsText": True,
            "showStudentgroup": True,
            "showLsNumber": True,
            "showSubstText": True,
            "showInfo": True,
            "showBooking": True,
            "klasseFields": _ELEMENT_FIELDS,
            "roomFields": _ELEMENT_FIELDS,
            "subjectFields": _ELEMENT_FIELDS,
            "teacherFields": _ELEMENT_FIELDS,
        }
    }
    return _list_result(client, "getTimetable", params)


def get_periods(
    client: RPCClient,
    element_type: int,
    element_id: int,
    start: date,
    end: date,
) -> List[Period]:
    """
    Like fetch_timetable(), but returns Period objects in chronological order,
    ready for ScheduleCollection.from_lessons().
    """
    records = fetch_timetable(client, element_type, element_id, start, end)
    return sort_periods(Period.from_raw(r) for r in records)
