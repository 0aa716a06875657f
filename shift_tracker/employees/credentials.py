"""Derived login credentials handed out once at registration.

email    = lowercase(id) + "@" + CREDENTIAL_EMAIL_DOMAIN
password = id + DEFAULT_PASSWORD_SUFFIX

Anyone who knows an employee id can derive both. Operations rely on the
scheme, so it stays until stakeholders agree on a replacement; an admin
password change overrides the default for a given user.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shift_tracker.config import settings


@dataclass(frozen=True)
class DerivedCredentials:
    email: str
    password: str


def derive_email(employee_id: str, domain: Optional[str] = None) -> str:
    return f"{employee_id.lower()}@{domain or settings.CREDENTIAL_EMAIL_DOMAIN}"


def derive_default_password(employee_id: str, suffix: Optional[str] = None) -> str:
    return f"{employee_id}{suffix if suffix is not None else settings.DEFAULT_PASSWORD_SUFFIX}"


def derive_credentials(employee_id: str) -> DerivedCredentials:
    return DerivedCredentials(
        email=derive_email(employee_id),
        password=derive_default_password(employee_id),
    )
