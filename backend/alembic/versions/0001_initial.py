"""initial schema: schedule windows, breaks, appointments, slots

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_SLOT = sa.text("status IN ('pending', 'confirmed')")


def upgrade():
    op.create_table(
        "schedule_windows",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("slot_duration_minutes", sa.Integer(), nullable=False, server_default=sa.text("30")),
    )
    op.create_index(
        "ix_schedule_windows_provider_day", "schedule_windows", ["provider_id", "day_of_week"]
    )

    op.create_table(
        "break_windows",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.Integer()),
        sa.Column("date", sa.Date()),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("label", sa.Text(), nullable=False, server_default=sa.text("'Break'")),
    )
    op.create_index("ix_break_windows_provider", "break_windows", ["provider_id"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.Text(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("type", sa.Text(), nullable=False, server_default=sa.text("'consultation'")),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("confirmed_at", sa.DateTime()),
        sa.Column("cancellation_reason", sa.Text()),
        sa.Column("rejection_reason", sa.Text()),
    )
    op.create_index(
        "uq_appointments_active_slot",
        "appointments",
        ["provider_id", "date", "time"],
        unique=True,
        sqlite_where=ACTIVE_SLOT,
        postgresql_where=ACTIVE_SLOT,
    )
    op.create_index("ix_appointments_patient", "appointments", ["patient_id"])

    op.create_table(
        "slots",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("is_break", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_booked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "appointment_id",
            sa.Integer(),
            sa.ForeignKey("appointments.id", ondelete="SET NULL"),
        ),
    )


def downgrade():
    op.drop_table("slots")
    op.drop_index("ix_appointments_patient", table_name="appointments")
    op.drop_index("uq_appointments_active_slot", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_break_windows_provider", table_name="break_windows")
    op.drop_table("break_windows")
    op.drop_index("ix_schedule_windows_provider_day", table_name="schedule_windows")
    op.drop_table("schedule_windows")
