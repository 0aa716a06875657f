"""Enums and constants for the shift tracker — matching the database ENUM types."""

from __future__ import annotations

import enum


# ── Directory ───────────────────────────────────────────────────────

class Department(str, enum.Enum):
    operations = "Operations"
    engineering = "Engineering"
    human_resource = "Human Resource"
    finance = "Finance"
    safety = "Safety"
    it = "IT"
    security = "Security"
    planning = "Planning"
    others = "Others"


class Section(str, enum.Enum):
    """Engineering sub-units; a manager's authority is scoped to one."""

    qc = "QC"
    rtg = "RTG"
    mes = "MES"
    shift_incharge = "Shift Incharge"
    planning = "Planning"
    store = "Store"
    infra = "Infra"
    others = "Others"


class ProfileRole(str, enum.Enum):
    employee = "employee"
    manager = "manager"


# ── Shifts ──────────────────────────────────────────────────────────

class ShiftType(str, enum.Enum):
    first_shift = "1st_shift"
    second_shift = "2nd_shift"
    third_shift = "3rd_shift"
    leave = "leave"
    medical = "medical"
    ot_off_day = "ot_off_day"
    ot_week_off = "ot_week_off"
    ot_public_holiday = "ot_public_holiday"
    other = "other"

    @property
    def label(self) -> str:
        return SHIFT_TYPE_LABELS[self]


SHIFT_TYPE_LABELS: dict[ShiftType, str] = {
    ShiftType.first_shift: "1st Shift",
    ShiftType.second_shift: "2nd Shift",
    ShiftType.third_shift: "3rd Shift",
    ShiftType.leave: "Leave",
    ShiftType.medical: "Medical Leave",
    ShiftType.ot_off_day: "OT as Off Day",
    ShiftType.ot_week_off: "OT as Week Off",
    ShiftType.ot_public_holiday: "OT as Public Holiday",
    ShiftType.other: "Other",
}


class WizardStep(str, enum.Enum):
    date_selection = "date_selection"
    shift_selection = "shift_selection"


class ApprovalFilter(str, enum.Enum):
    all = "all"
    pending = "pending"
    approved = "approved"


# ── Views / Auth ────────────────────────────────────────────────────

class View(str, enum.Enum):
    """The four mutually exclusive dashboards a session can show."""

    employee = "employee"
    manager = "manager"
    hr = "hr"
    admin = "admin"


class RegistrationStatus(str, enum.Enum):
    none = "none"
    pending = "pending"
    approved = "approved"


# ── Misc constants ──────────────────────────────────────────────────

ISO_DATE_FORMAT = "%Y-%m-%d"
EXPORT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
EMPTY_CELL = "-"
UNKNOWN_CELL = "Unknown"
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
