"""initial schema

Revision ID: 5b1e0c7a9d21
Revises:
Create Date: 2026-10-12 10:41:27.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e0c7a9d21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PATIENT_STATUS = sa.Enum("Waiting", "Consulting", "Finished", name="patientstatus")
QUEUE_TYPE = sa.Enum("Consultation", "Re-consultation", name="queuetype")
BOOKING_SOURCE = sa.Enum("patient", "nurse", name="bookingsource")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "clinics",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("owner_uid", sa.String(36), nullable=True),
        sa.Column("owner_name", sa.String(255), nullable=True),
        sa.Column("owner_email", sa.String(255), nullable=True),
        sa.Column("consultation_time", sa.Integer(), nullable=False),
        sa.Column("consultation_cost", sa.Float(), nullable=False),
        sa.Column("re_consultation_cost", sa.Float(), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("language", sa.String(8), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("subscription_status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_clinics_name", "clinics", ["name"])
    op.create_index("ix_clinics_slug", "clinics", ["slug"], unique=True)
    op.create_index("ix_clinics_owner_uid", "clinics", ["owner_uid"])
    op.create_index("ix_clinics_is_active", "clinics", ["is_active"])

    op.create_table(
        "doctors",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("specialty", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        sa.Column("total_revenue", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_doctors_clinic_id", "doctors", ["clinic_id"])
    op.create_index("ix_doctors_is_active", "doctors", ["is_active"])

    op.create_table(
        "nurses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("doctor_id", sa.String(36), sa.ForeignKey("doctors.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_nurses_clinic_id", "nurses", ["clinic_id"])

    op.create_table(
        "patients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("doctor_id", sa.String(36), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("booking_day", sa.String(10), nullable=False),
        sa.Column("queue_number", sa.Integer(), nullable=False),
        sa.Column("status", PATIENT_STATUS, nullable=False),
        sa.Column("queue_type", QUEUE_TYPE, nullable=False),
        sa.Column("source", BOOKING_SOURCE, nullable=False),
        sa.Column("consultation_reason", sa.Text(), nullable=True),
        sa.Column("chronic_diseases", sa.Text(), nullable=True),
        sa.Column("prescription", sa.Text(), nullable=False),
        sa.Column("nurse_id", sa.String(36), nullable=True),
        sa.Column("nurse_name", sa.String(255), nullable=True),
        sa.Column("ticket_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("called_at", sa.DateTime(), nullable=True),
        sa.Column("finished_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("clinic_id", "doctor_id", "booking_day", "queue_number", name="uq_patient_queue_slot"),
    )
    op.create_index("ix_patients_clinic_id", "patients", ["clinic_id"])
    op.create_index("ix_patients_doctor_id", "patients", ["doctor_id"])
    op.create_index("ix_patients_phone", "patients", ["phone"])
    op.create_index("ix_patients_status", "patients", ["status"])
    # duplicate guard and queue listings
    op.create_index("ix_patient_partition", "patients", ["clinic_id", "doctor_id", "booking_day"])
    # re-consultation eligibility
    op.create_index("ix_patient_phone_doctor", "patients", ["phone", "doctor_id"])

    op.create_table(
        "booking_tickets",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("doctor_id", sa.String(36), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("patient_id", sa.String(36), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("queue_number", sa.Integer(), nullable=False),
        sa.Column("status", PATIENT_STATUS, nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("phone_last4", sa.String(4), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_booking_tickets_clinic_id", "booking_tickets", ["clinic_id"])
    op.create_index("ix_booking_tickets_doctor_id", "booking_tickets", ["doctor_id"])
    op.create_index("ix_booking_tickets_patient_id", "booking_tickets", ["patient_id"])
    op.create_index("ix_booking_tickets_expires_at", "booking_tickets", ["expires_at"])

    op.create_table(
        "queue_state",
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), primary_key=True),
        sa.Column("doctor_id", sa.String(36), sa.ForeignKey("doctors.id"), primary_key=True),
        sa.Column("booking_day", sa.String(10), nullable=False),
        sa.Column("current_consulting_queue_number", sa.Integer(), nullable=True),
        sa.Column("is_open", sa.Boolean(), nullable=False),
        sa.Column("max_queue_number", sa.Integer(), nullable=False),
        sa.Column("waiting_count", sa.Integer(), nullable=False),
        sa.Column("finished_count", sa.Integer(), nullable=False),
        sa.Column("avg_wait_minutes", sa.Float(), nullable=True),
        sa.Column("last_called_at", sa.DateTime(), nullable=True),
        sa.Column("last_finished_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "queue_counters",
        sa.Column("clinic_id", sa.String(36), primary_key=True),
        sa.Column("doctor_id", sa.String(36), primary_key=True),
        sa.Column("booking_day", sa.String(10), primary_key=True),
        sa.Column("last_number", sa.Integer(), nullable=False),
    )

    op.create_table(
        "user_profiles",
        sa.Column("uid", sa.String(36), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("role", sa.Enum("owner", "doctor", "nurse", name="roleenum"), nullable=False),
        sa.Column("doctor_id", sa.String(36), nullable=True),
        sa.Column("nurse_id", sa.String(36), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("invited_by", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_user_profiles_clinic_id", "user_profiles", ["clinic_id"])

    op.create_table(
        "invites",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("doctor", "nurse", name="inviterole"), nullable=False),
        sa.Column("created_by_uid", sa.String(36), nullable=False),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("status", sa.Enum("pending", "accepted", "revoked", "expired", name="invitestatus"), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("accepted_by_uid", sa.String(36), nullable=True),
        sa.Column("accepted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_invites_clinic_id", "invites", ["clinic_id"])
    op.create_index("ix_invites_email", "invites", ["email"])
    op.create_index("ix_invites_status", "invites", ["status"])

    op.create_table(
        "platform_admins",
        sa.Column("uid", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "platform_clients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), nullable=False),
        sa.Column("clinic_name", sa.String(255), nullable=False),
        sa.Column("owner_uid", sa.String(36), nullable=False),
        sa.Column("owner_email", sa.String(255), nullable=False),
        sa.Column("plan", sa.String(20), nullable=False),
        sa.Column("status", sa.Enum("active", "suspended", "canceled", name="clientstatus"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("canceled_at", sa.DateTime(), nullable=True),
        sa.Column("last_modified_by", sa.String(36), nullable=True),
    )
    op.create_index("ix_platform_clients_clinic_id", "platform_clients", ["clinic_id"])
    op.create_index("ix_platform_clients_status", "platform_clients", ["status"])
    op.create_index("ix_platform_clients_created_at", "platform_clients", ["created_at"])


def downgrade() -> None:
    for table in (
        "platform_clients", "platform_admins", "invites", "user_profiles", "queue_counters",
        "queue_state", "booking_tickets", "patients", "nurses", "doctors", "clinics", "users",
    ):
        op.drop_table(table)
