"""001 – Initial schema: roster, attendance, KPI inputs, leave ledger, settings, audit.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-02-02 09:00:00.000000+07:00
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
        "attendance_status",
        [
            "present",
            "sick",
            "leave",
            "absent",
            "holiday",
            "overtime",
            "paid_leave",
        ],
    ),
    ("submission_status", ["pending", "approved", "rejected"]),
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
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. employees ──────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE employees (
            id                 VARCHAR(64) PRIMARY KEY,
            employee_code      VARCHAR(30) UNIQUE,
            name               VARCHAR(150) NOT NULL,
            email              VARCHAR(255),
            job_title          VARCHAR(150) DEFAULT '',
            division           VARCHAR(100),
            company            VARCHAR(100) NOT NULL,
            hire_date          VARCHAR(40),
            is_remote_allowed  BOOLEAN DEFAULT FALSE,
            salary_config      JSONB,
            outstanding_debt   BIGINT DEFAULT 0,
            is_active          BOOLEAN DEFAULT TRUE,
            created_at         TIMESTAMPTZ DEFAULT NOW(),
            updated_at         TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX ix_employees_company ON employees(company)")

    # ── 2. attendance_records ─────────────────────────────────────────────
    op.execute("""
        CREATE TABLE attendance_records (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  VARCHAR(64) NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            company      VARCHAR(100) NOT NULL,
            date         DATE NOT NULL,
            status       attendance_status NOT NULL DEFAULT 'present',
            clock_in     VARCHAR(5),
            clock_out    VARCHAR(5),
            notes        TEXT,
            source       VARCHAR(30) DEFAULT 'clock',
            created_at   TIMESTAMPTZ DEFAULT NOW(),
            updated_at   TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_attendance_employee_date UNIQUE (employee_id, date)
        )
    """)
    op.execute(
        "CREATE INDEX ix_attendance_company_date ON attendance_records(company, date)"
    )

    # ── 3. shift_assignments ──────────────────────────────────────────────
    op.execute("""
        CREATE TABLE shift_assignments (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  VARCHAR(64) NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            company      VARCHAR(100) NOT NULL,
            date         DATE NOT NULL,
            shift_id     VARCHAR(50) NOT NULL,
            created_at   TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_shift_assignment_employee_date UNIQUE (employee_id, date)
        )
    """)

    # ── 4. attendance_submissions ─────────────────────────────────────────
    op.execute("""
        CREATE TABLE attendance_submissions (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id  VARCHAR(64) NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            company      VARCHAR(100) NOT NULL,
            type         attendance_status NOT NULL,
            start_date   DATE NOT NULL,
            end_date     DATE NOT NULL,
            notes        TEXT,
            status       submission_status NOT NULL DEFAULT 'pending',
            reviewed_by  VARCHAR(64),
            submitted_at TIMESTAMPTZ DEFAULT NOW(),
            reviewed_at  TIMESTAMPTZ,
            CHECK (end_date >= start_date)
        )
    """)

    # ── 5. content_posts ──────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE content_posts (
            id            UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            company       VARCHAR(100) NOT NULL,
            creator_id    VARCHAR(64) NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            title         VARCHAR(300) NOT NULL,
            brand         VARCHAR(100),
            platform      VARCHAR(30),
            posting_date  DATE,
            link          TEXT,
            created_at    TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX ix_content_posts_company_posting_date "
        "ON content_posts(company, posting_date)"
    )

    # ── 6. live_reports ───────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE live_reports (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            company           VARCHAR(100) NOT NULL,
            host_id           VARCHAR(64) NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            report_date       DATE NOT NULL,
            brand             VARCHAR(100),
            gmv               BIGINT NOT NULL DEFAULT 0,
            duration_minutes  INTEGER DEFAULT 0,
            total_views       INTEGER DEFAULT 0,
            created_at        TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX ix_live_reports_company_report_date "
        "ON live_reports(company, report_date)"
    )

    # ── 7. leave_adjustments ──────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_adjustments (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id     VARCHAR(64) NOT NULL REFERENCES employees(id) ON DELETE CASCADE,
            days            NUMERIC(5,1) NOT NULL,
            reason          TEXT NOT NULL,
            effective_date  DATE NOT NULL,
            created_by      VARCHAR(64),
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            CHECK (days <> 0)
        )
    """)
    op.execute(
        "CREATE INDEX ix_leave_adjustments_employee_effective "
        "ON leave_adjustments(employee_id, effective_date)"
    )

    # ── 8. app_settings ───────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE app_settings (
            key          VARCHAR(150) PRIMARY KEY,
            value        JSONB NOT NULL,
            description  TEXT,
            updated_at   TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 9. audit_trail ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE audit_trail (
            id           UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            actor_id     VARCHAR(64),
            action       VARCHAR(50) NOT NULL,
            entity_type  VARCHAR(50) NOT NULL,
            entity_id    VARCHAR(150) NOT NULL,
            old_values   JSONB,
            new_values   JSONB,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX ix_audit_trail_entity ON audit_trail(entity_type, entity_id)"
    )
    op.execute("CREATE INDEX ix_audit_trail_created_at ON audit_trail(created_at)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "audit_trail",
        "app_settings",
        "leave_adjustments",
        "live_reports",
        "content_posts",
        "attendance_submissions",
        "shift_assignments",
        "attendance_records",
        "employees",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)

    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
