"""Initial academy schema: admins, groups, students, parents, payments,
attendance, scores and course materials.

Revision ID: 5b1f0c2d9a10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5b1f0c2d9a10"
down_revision = None
branch_labels = None
depends_on = None


def _tenant_column():
    return sa.Column("admin_id", sa.Integer(), nullable=True)


def upgrade():
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=100), nullable=False, unique=True),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=150), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255)),
        sa.Column("phone", sa.String(length=50)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime()),
    )

    op.create_table(
        "study_groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_column(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("teacher", sa.String(length=150)),
        sa.Column("schedule", sa.String(length=150)),
        sa.Column("level", sa.String(length=20)),
        sa.Column("max_students", sa.Integer()),
        sa.Column("color", sa.String(length=64)),
        sa.Column("created_at", sa.DateTime()),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_column(),
        sa.Column("full_name", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=255)),
        sa.Column("phone", sa.String(length=50)),
        sa.Column("username", sa.String(length=100), nullable=False, unique=True),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("group", sa.String(length=100)),
        sa.Column("created_at", sa.DateTime()),
    )

    op.create_table(
        "parents",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_column(),
        sa.Column("full_name", sa.String(length=150), nullable=False, server_default="Parent"),
        sa.Column("email", sa.String(length=255)),
        sa.Column("phone", sa.Text()),
        sa.Column("created_at", sa.DateTime()),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_column(),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id"), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("month", sa.String(length=50)),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("due_date", sa.Date()),
        sa.Column("penalty_per_day", sa.Integer(), nullable=False, server_default="10000"),
        sa.Column("paid_at", sa.Date()),
        sa.Column("note", sa.Text()),
        sa.Column("created_at", sa.DateTime()),
    )

    op.create_table(
        "attendance",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_column(),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id"), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="present"),
        sa.Column("note", sa.Text()),
        sa.Column("created_at", sa.DateTime()),
    )

    op.create_table(
        "scores",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_column(),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id"), nullable=True),
        sa.Column("score_type", sa.String(length=20), nullable=False, server_default="weekly"),
        sa.Column("level", sa.String(length=20)),
        sa.Column("subject", sa.String(length=100), nullable=False, server_default="overall"),
        sa.Column("breakdown", sa.JSON(), nullable=False),
        sa.Column("overall_percent", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime()),
    )

    op.create_table(
        "materials",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_column(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("file_url", sa.String(length=1024), nullable=False),
        sa.Column("file_type", sa.String(length=20), nullable=False, server_default="document"),
        sa.Column("group", sa.String(length=100)),
        sa.Column("uploaded_by", sa.String(length=150)),
        sa.Column("due_date", sa.Date()),
        sa.Column("created_at", sa.DateTime()),
    )

    for table in ("study_groups", "students", "parents", "payments", "attendance", "scores", "materials"):
        op.create_index(f"ix_{table}_admin_id", table, ["admin_id"])
    for table in ("payments", "attendance", "scores"):
        op.create_index(f"ix_{table}_student_id", table, ["student_id"])


def downgrade():
    for table in ("payments", "attendance", "scores"):
        op.drop_index(f"ix_{table}_student_id", table_name=table)
    for table in ("materials", "scores", "attendance", "payments", "parents", "students", "study_groups"):
        op.drop_index(f"ix_{table}_admin_id", table_name=table)
        op.drop_table(table)
    op.drop_table("admins")
