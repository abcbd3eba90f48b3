"""Create bookings and booking_documents

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2025-09-02 10:14:03.511208

"""
from alembic import op
import sqlalchemy as sa


revision = "3f1c9a7d2b10"
down_revision = None
branch_labels = None
depends_on = None


rental_status_enum = sa.Enum("PENDING", "APPROVED", "CANCEL", name="rentalstatus")
duration_type_enum = sa.Enum("WEEKLY", "MONTHLY", "SEMESTER", "YEARLY", name="durationtype")
document_type_enum = sa.Enum("BOOKING_SLIP", "RECEIPT", "SOP", "INVOICE", name="documenttype")


def upgrade():
    # 1️⃣ Bookings
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("rental_status", rental_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("room_number", sa.String(), nullable=False, server_default="Belum diset"),
        sa.Column("room_type", sa.String(), nullable=True),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("contact_phone", sa.String(), nullable=True),
        sa.Column("contact_whatsapp", sa.String(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("duration_type", duration_type_enum, nullable=False, server_default="MONTHLY"),
        sa.Column("amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("paid_amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="IDR"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # 2️⃣ Documents attached to a booking (append-only)
    op.create_table(
        "booking_documents",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("booking_id", sa.String(length=36), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", document_type_enum, nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("file_url", sa.String(), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index("ix_booking_documents_id", "booking_documents", ["id"], unique=True)
    op.create_index("ix_booking_documents_booking_id", "booking_documents", ["booking_id"])


def downgrade():
    op.drop_index("ix_booking_documents_booking_id", table_name="booking_documents")
    op.drop_index("ix_booking_documents_id", table_name="booking_documents")
    op.drop_table("booking_documents")
    op.drop_table("bookings")

    # Drop ENUM types (no-op on SQLite)
    document_type_enum.drop(op.get_bind(), checkfirst=True)
    duration_type_enum.drop(op.get_bind(), checkfirst=True)
    rental_status_enum.drop(op.get_bind(), checkfirst=True)
