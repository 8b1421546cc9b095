"""Create users, loans, loan_applications and payment_info tables"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_microloan_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("photo_url", sa.String(length=1024), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="borrower"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("suspend_reason", sa.String(length=255), nullable=True),
        sa.Column("suspend_feedback", sa.Text(), nullable=True),
        sa.Column("role_updated_by", sa.String(length=255), nullable=True),
        sa.Column("role_updated_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint("role IN ('borrower', 'manager', 'admin')", name="ck_users_role"),
        sa.CheckConstraint("status IN ('active', 'suspended')", name="ck_users_status"),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "loans",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("tracking_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("interest_rate", sa.Numeric(10, 4), nullable=True),
        sa.Column("max_loan_limit", sa.Numeric(18, 2), nullable=False),
        sa.Column("required_documents", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("emi_plans", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("show_on_home", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.UniqueConstraint("tracking_id", name="uq_loans_tracking_id"),
        sa.CheckConstraint("max_loan_limit >= 0", name="ck_loans_max_limit_nonneg"),
        sa.CheckConstraint("interest_rate >= 0", name="ck_loans_interest_rate_nonneg"),
    )
    op.create_index("ix_loans_category", "loans", ["category"])
    op.create_index("ix_loans_show_on_home", "loans", ["show_on_home"])
    op.create_index("ix_loans_created_by", "loans", ["created_by"])

    op.create_table(
        "loan_applications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "loan_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("loans.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("loan_title", sa.String(length=255), nullable=True),
        sa.Column("loan_category", sa.String(length=100), nullable=True),
        sa.Column("interest_rate", sa.Numeric(10, 4), nullable=True),
        sa.Column("borrower_email", sa.String(length=255), nullable=False),
        sa.Column("borrower_name", sa.String(length=255), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("contact_number", sa.String(length=50), nullable=True),
        sa.Column("national_id", sa.String(length=100), nullable=True),
        sa.Column("income_source", sa.String(length=255), nullable=True),
        sa.Column("monthly_income", sa.Numeric(18, 2), nullable=False),
        sa.Column("loan_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("extra_notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("application_fee_status", sa.String(length=20), nullable=False, server_default="unpaid"),
        sa.Column("transaction_id", sa.String(length=255), nullable=True),
        sa.Column("paid_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("approved_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint("monthly_income >= 0", name="ck_loan_app_income_nonneg"),
        sa.CheckConstraint("loan_amount >= 0", name="ck_loan_app_amount_nonneg"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_loan_app_status"),
        sa.CheckConstraint("application_fee_status IN ('unpaid', 'paid')", name="ck_loan_app_fee_status"),
    )
    op.create_index("ix_loan_applications_loan_id", "loan_applications", ["loan_id"])
    op.create_index("ix_loan_applications_borrower_email", "loan_applications", ["borrower_email"])
    op.create_index("ix_loan_applications_status", "loan_applications", ["status"])

    op.create_table(
        "payment_info",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "loan_application_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("loan_applications.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("transaction_id", sa.String(length=255), nullable=False),
        sa.Column("session_id", sa.String(length=255), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="usd"),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("paid_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("transaction_id", name="uq_payment_info_transaction_id"),
        sa.CheckConstraint("amount >= 0", name="ck_payment_info_amount_nonneg"),
    )
    op.create_index("ix_payment_info_loan_application_id", "payment_info", ["loan_application_id"])
    op.create_index("ix_payment_info_customer_email", "payment_info", ["customer_email"])


def downgrade() -> None:
    op.drop_index("ix_payment_info_customer_email", table_name="payment_info")
    op.drop_index("ix_payment_info_loan_application_id", table_name="payment_info")
    op.drop_table("payment_info")
    op.drop_index("ix_loan_applications_status", table_name="loan_applications")
    op.drop_index("ix_loan_applications_borrower_email", table_name="loan_applications")
    op.drop_index("ix_loan_applications_loan_id", table_name="loan_applications")
    op.drop_table("loan_applications")
    op.drop_index("ix_loans_created_by", table_name="loans")
    op.drop_index("ix_loans_show_on_home", table_name="loans")
    op.drop_index("ix_loans_category", table_name="loans")
    op.drop_table("loans")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
