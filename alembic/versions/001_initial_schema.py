"""001 – Initial schema: profiles, shift entries, view sessions, audit trail.

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-03-01 09:00:00.000000+05:30
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    (
        "department",
        [
            "Operations",
            "Engineering",
            "Human Resource",
            "Finance",
            "Safety",
            "IT",
            "Security",
            "Planning",
            "Others",
        ],
    ),
    (
        "section",
        ["QC", "RTG", "MES", "Shift Incharge", "Planning", "Store", "Infra", "Others"],
    ),
    ("profile_role", ["employee", "manager"]),
    (
        "shift_type",
        [
            "1st_shift",
            "2nd_shift",
            "3rd_shift",
            "leave",
            "medical",
            "ot_off_day",
            "ot_week_off",
            "ot_public_holiday",
            "other",
        ],
    ),
    ("view_type", ["employee", "manager", "hr", "admin"]),
    ("wizard_step", ["date_selection", "shift_selection"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. profiles (employees + seeded managers) ─────────────────────────
    op.execute("""
        CREATE TABLE profiles (
            id                   VARCHAR(64)  PRIMARY KEY,
            full_name            VARCHAR(200) NOT NULL,
            department           department   NOT NULL,
            section              section,
            role                 profile_role NOT NULL DEFAULT 'employee',
            is_approved          BOOLEAN      NOT NULL DEFAULT FALSE,
            pending_registration BOOLEAN      NOT NULL DEFAULT TRUE,
            created_at           TIMESTAMPTZ  DEFAULT NOW(),
            approved_at          TIMESTAMPTZ,
            CONSTRAINT ck_profiles_section_iff_engineering
                CHECK ((department = 'Engineering') = (section IS NOT NULL))
        )
    """)
    op.execute("CREATE INDEX ix_profiles_section ON profiles (section)")
    op.execute(
        "CREATE INDEX ix_profiles_pending ON profiles (pending_registration) "
        "WHERE pending_registration"
    )

    # ── 2. shift_entries ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE shift_entries (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id   VARCHAR(64) NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            date          DATE        NOT NULL,
            shift_type    shift_type  NOT NULL,
            other_remark  TEXT,
            created_at    TIMESTAMPTZ DEFAULT NOW(),
            approved      BOOLEAN     NOT NULL DEFAULT FALSE,
            approved_by   VARCHAR(64) REFERENCES profiles(id) ON DELETE SET NULL,
            approved_at   TIMESTAMPTZ,
            CONSTRAINT uq_shift_entries_employee_date UNIQUE (employee_id, date),
            CONSTRAINT ck_shift_entries_remark_iff_other
                CHECK ((shift_type = 'other') = (other_remark IS NOT NULL))
        )
    """)
    op.execute("CREATE INDEX ix_shift_entries_created_at ON shift_entries (created_at)")
    op.execute("CREATE INDEX ix_shift_entries_date ON shift_entries (date)")

    # ── 3. view_sessions ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE view_sessions (
            id                  UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            active_view         view_type   NOT NULL DEFAULT 'employee',
            employee_id         VARCHAR(64),
            wizard_step         wizard_step NOT NULL DEFAULT 'date_selection',
            selected_date       DATE,
            manager_id          VARCHAR(64),
            manager_section     VARCHAR(32),
            hr_authenticated    BOOLEAN     NOT NULL DEFAULT FALSE,
            admin_authenticated BOOLEAN     NOT NULL DEFAULT FALSE,
            ip_address          VARCHAR(45),
            user_agent          TEXT,
            expires_at          TIMESTAMPTZ NOT NULL,
            is_revoked          BOOLEAN     NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_view_sessions_employee_id ON view_sessions (employee_id)")

    # ── 4. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id    VARCHAR(64),
            actor_view  VARCHAR(20) NOT NULL,
            action      VARCHAR(50) NOT NULL,
            entity_type VARCHAR(50) NOT NULL,
            entity_id   VARCHAR(64) NOT NULL,
            old_values  JSON,
            new_values  JSON,
            ip_address  VARCHAR(45),
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_audit_trail_actor_id ON audit_trail (actor_id)")
    op.execute("CREATE INDEX ix_audit_trail_entity ON audit_trail (entity_type, entity_id)")
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail (created_at)")
    op.execute("CREATE INDEX ix_audit_trail_action ON audit_trail (action)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    for t in ["audit_trail", "view_sessions", "shift_entries", "profiles"]:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    # Drop enum types
    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)

    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
