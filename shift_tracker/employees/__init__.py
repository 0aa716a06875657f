"""Employees module — Profile model, Identity Store, registration and seeded managers."""

from shift_tracker.employees.models import Profile

__all__ = ["Profile"]
