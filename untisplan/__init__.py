"""
untisplan - WebUntis client that rebuilds weekly schedules from single periods.
"""

from untisplan.errors import HTTPStatusError, RPCError, UntisError, ValidationError
from untisplan.model import (
    Element,
    ElementCollection,
    Period,
    PlainElement,
    SubstitutedElement,
    element_from_raw,
)
from untisplan.rpc import RPCClient
from untisplan.schedule import Schedule, ScheduleCollection

__all__ = [
    "Element",
    "ElementCollection",
    "HTTPStatusError",
    "Period",
    "PlainElement",
    "RPCClient",
    "RPCError",
    "Schedule",
    "ScheduleCollection",
    "SubstitutedElement",
    "UntisError",
    "ValidationError",
    "element_from_raw",
]
