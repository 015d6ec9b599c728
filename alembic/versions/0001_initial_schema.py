"""Create reservations, admin users, service offerings and audit events."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_ACTIVE_SLOT_PREDICATE = "status IN ('PENDING', 'CONFIRMED')"

reservation_status = sa.Enum(
    "PENDING", "CONFIRMED", "CANCELLED", "RESCHEDULED", name="reservationstatus"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "reservations",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("customer_name", sa.String(length=120), nullable=False),
        sa.Column("customer_email", sa.String(length=320), nullable=False),
        sa.Column("slot_date", sa.Date(), nullable=False),
        sa.Column("slot_time", sa.Time(), nullable=False),
        sa.Column("status", reservation_status, nullable=False),
        sa.Column("cancel_token", sa.String(length=64), nullable=False, unique=True),
        sa.Column("external_event_ref", sa.String(length=255), nullable=True),
        sa.Column("cancellation_reason", sa.String(length=500), nullable=True),
        sa.Column("rescheduled_from_id", sa.Uuid(as_uuid=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_reservations_slot_date", "reservations", ["slot_date"])
    op.create_index(
        "ix_reservations_email_date",
        "reservations",
        ["customer_email", "slot_date"],
    )
    op.create_index(
        "uq_reservations_active_slot",
        "reservations",
        ["slot_date", "slot_time"],
        unique=True,
        sqlite_where=sa.text(_ACTIVE_SLOT_PREDICATE),
        postgresql_where=sa.text(_ACTIVE_SLOT_PREDICATE),
    )

    op.create_table(
        "admin_users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "service_offerings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("description", sa.String(length=1024), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column(
            "price", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")
        ),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("event_type", sa.String(length=120), nullable=False),
        sa.Column("actor", sa.String(length=320), nullable=True),
        sa.Column("reservation_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("description", sa.String(length=1024), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_audit_events_reservation_id", "audit_events", ["reservation_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_audit_events_reservation_id", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_table("service_offerings")
    op.drop_table("admin_users")
    op.drop_index("uq_reservations_active_slot", table_name="reservations")
    op.drop_index("ix_reservations_email_date", table_name="reservations")
    op.drop_index("ix_reservations_slot_date", table_name="reservations")
    op.drop_table("reservations")
    reservation_status.drop(op.get_bind(), checkfirst=True)
