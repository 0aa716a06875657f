"""Common module — shared utilities for the shift tracker."""

from shift_tracker.common.audit import AuditTrail, create_audit_entry
from shift_tracker.common.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ApprovalFilter,
    Department,
    ProfileRole,
    Section,
    ShiftType,
    View,
    WizardStep,
)
from shift_tracker.common.exceptions import (
    AlreadyApprovedError,
    AppException,
    ConflictError,
    ForbiddenException,
    InvalidCredentials,
    NotFoundException,
    StoreError,
    ValidationException,
    register_exception_handlers,
)
from shift_tracker.common.filters import apply_filters, apply_sorting
from shift_tracker.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "ApprovalFilter",
    "Department",
    "ProfileRole",
    "Section",
    "ShiftType",
    "View",
    "WizardStep",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AlreadyApprovedError",
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "InvalidCredentials",
    "NotFoundException",
    "StoreError",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_sorting",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
