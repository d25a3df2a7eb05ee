from .tables import (
    ACTIVE_STATUSES,
    Appointments,
    Base,
    BreakWindows,
    ScheduleWindows,
    Slots,
    metadata,
)

__all__ = [
    "ACTIVE_STATUSES",
    "Appointments",
    "Base",
    "BreakWindows",
    "ScheduleWindows",
    "Slots",
    "metadata",
]
