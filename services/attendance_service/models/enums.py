"""Enum definitions for attendance service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class TimeEntryAction(str, enum.Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    MEAL_START = "meal_start"
    MEAL_END = "meal_end"


CLOCK_ACTIONS = (TimeEntryAction.CLOCK_IN, TimeEntryAction.CLOCK_OUT)


class ZoneType(str, enum.Enum):
    CIRCLE = "circle"
    POLYGON = "polygon"
