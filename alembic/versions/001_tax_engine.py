"""Tax engine schema.

Revision ID: 001
Revises:
"""

from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Holdings - open positions per user
    op.create_table(
        "holdings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("symbol", sa.String(50), nullable=False),
        sa.Column("asset_category", sa.String(20), nullable=False),  # equity, crypto, equity_fund, ...
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("average_price", sa.Float(), nullable=False),
        sa.Column("current_price", sa.Float(), nullable=True),
        sa.Column("acquisition_date", sa.Date(), nullable=False),
        sa.Column("platform", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_holdings_user_id", "holdings", ["user_id"])
    op.create_index("ix_holdings_user_symbol", "holdings", ["user_id", "symbol"])

    # Transactions - append-only ledger; holding_id deliberately has no FK
    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("holding_id", sa.String(36), nullable=True),
        sa.Column("recommendation_id", sa.String(36), nullable=True),
        sa.Column("transaction_type", sa.String(10), nullable=False),  # buy, sell
        sa.Column("symbol", sa.String(50), nullable=False),
        sa.Column("asset_category", sa.String(20), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("fees", sa.Float(), default=0.0),
        sa.Column("platform", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        # Reversal
        sa.Column("is_reversed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reversed_at", sa.DateTime(), nullable=True),
        sa.Column("reversed_by_id", sa.String(36), nullable=True),
        sa.Column("reversal_of_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_holding_id", "transactions", ["holding_id"])
    op.create_index(
        "ix_transactions_user_symbol_date",
        "transactions",
        ["user_id", "symbol", "transaction_date"],
    )

    # Tax configurations - rate table per fiscal year, rates as fractions
    op.create_table(
        "tax_configurations",
        sa.Column("fiscal_year", sa.String(7), primary_key=True),
        sa.Column("short_term_equity_rate", sa.Float(), nullable=False),
        sa.Column("long_term_equity_rate", sa.Float(), nullable=False),
        sa.Column("long_term_equity_exemption", sa.Float(), nullable=False),
        sa.Column("crypto_short_term_rate", sa.Float(), nullable=False),
        sa.Column("crypto_long_term_rate", sa.Float(), nullable=False),
        sa.Column("other_short_term_rate", sa.Float(), nullable=False),
        sa.Column("other_long_term_rate", sa.Float(), nullable=False),
        sa.Column("default_rate", sa.Float(), nullable=False),
        sa.Column("surcharge_threshold", sa.Float(), nullable=False),
        sa.Column("surcharge_rate", sa.Float(), nullable=False),
        sa.Column("cess_rate", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    # Carry-forward - losses carried into fiscal_year from source_fiscal_year
    op.create_table(
        "tax_carry_forwards",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("fiscal_year", sa.String(7), nullable=False),
        sa.Column("source_fiscal_year", sa.String(7), nullable=False),
        sa.Column("short_term_loss", sa.Float(), nullable=False, server_default="0"),
        sa.Column("long_term_loss", sa.Float(), nullable=False, server_default="0"),
        sa.Column("expires_in", sa.Integer(), nullable=False, server_default="8"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "fiscal_year", name="uq_carry_forward_user_year"),
    )
    op.create_index("ix_tax_carry_forwards_user_id", "tax_carry_forwards", ["user_id"])

    # Recommendations - tax-loss harvesting candidates
    op.create_table(
        "tax_recommendations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("holding_id", sa.String(36), nullable=True),
        sa.Column("symbol", sa.String(50), nullable=False),
        sa.Column("recommendation_type", sa.String(20), nullable=False),
        sa.Column("current_price", sa.Float(), nullable=True),
        sa.Column("purchase_price", sa.Float(), nullable=True),
        sa.Column("quantity", sa.Float(), nullable=True),
        sa.Column("potential_loss", sa.Float(), nullable=True),
        sa.Column("tax_savings", sa.Float(), nullable=True),
        sa.Column("priority_score", sa.Integer(), nullable=True),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="pending"),  # pending, accepted, rejected, expired
        sa.Column("wash_sale_warning", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("executed_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_tax_recommendations_user_id", "tax_recommendations", ["user_id"])
    op.create_index("ix_tax_recommendations_status", "tax_recommendations", ["status"])


def downgrade() -> None:
    op.drop_table("tax_recommendations")
    op.drop_table("tax_carry_forwards")
    op.drop_table("tax_configurations")
    op.drop_table("transactions")
    op.drop_table("holdings")
