"""create_payment_transactions_table

Revision ID: b4d6f8a0c2e3
Revises: a3c5e7f9b1d2
Create Date: 2026-10-05 09:20:13.552018

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b4d6f8a0c2e3'
down_revision = 'a3c5e7f9b1d2'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('payment_transactions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('batch_id', sa.String(length=36), nullable=False),
        sa.Column('customer_phone', sa.String(length=20), nullable=False),
        sa.Column('amount_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('reward_count', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('swish_payment_reference', sa.String(length=64), nullable=True),
        sa.Column('swish_transaction_id', sa.String(length=64), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.Column('retry_count', sa.Integer(), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['batch_id'], ['payment_batches.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('swish_payment_reference')
    )
    op.create_index('ix_payment_transactions_batch_id', 'payment_transactions', ['batch_id'], unique=False)
    op.create_index('ix_payment_transactions_customer_phone', 'payment_transactions', ['customer_phone'], unique=False)
    op.create_index('ix_payment_transactions_swish_transaction_id', 'payment_transactions', ['swish_transaction_id'], unique=False)

    op.create_table('payment_failures',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('payment_transaction_id', sa.String(length=36), nullable=False),
        sa.Column('failure_reason', sa.Text(), nullable=False),
        sa.Column('swish_error_code', sa.String(length=50), nullable=True),
        sa.Column('retry_attempts', sa.Integer(), nullable=False),
        sa.Column('resolution_status', sa.String(length=20), nullable=False),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['payment_transaction_id'], ['payment_transactions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payment_failures_payment_transaction_id', 'payment_failures', ['payment_transaction_id'], unique=False)


def downgrade():
    op.drop_index('ix_payment_failures_payment_transaction_id', table_name='payment_failures')
    op.drop_table('payment_failures')
    op.drop_index('ix_payment_transactions_swish_transaction_id', table_name='payment_transactions')
    op.drop_index('ix_payment_transactions_customer_phone', table_name='payment_transactions')
    op.drop_index('ix_payment_transactions_batch_id', table_name='payment_transactions')
    op.drop_table('payment_transactions')
