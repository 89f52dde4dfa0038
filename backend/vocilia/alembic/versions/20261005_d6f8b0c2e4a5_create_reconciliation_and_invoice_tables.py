"""create_reconciliation_and_invoice_tables

Revision ID: d6f8b0c2e4a5
Revises: c5e7a9b1d3f4
Create Date: 2026-10-05 09:45:02.317760

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'd6f8b0c2e4a5'
down_revision = 'c5e7a9b1d3f4'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('reconciliation_reports',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('batch_id', sa.String(length=36), nullable=False),
        sa.Column('report_period', sa.String(length=8), nullable=False),
        sa.Column('total_rewards_paid_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('admin_fees_collected_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_success_count', sa.Integer(), nullable=False),
        sa.Column('payment_failure_count', sa.Integer(), nullable=False),
        sa.Column('discrepancy_count', sa.Integer(), nullable=False),
        sa.Column('discrepancy_amount_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('store_breakdown', sa.JSON(), nullable=False),
        sa.Column('discrepancies', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['batch_id'], ['payment_batches.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reconciliation_reports_batch_id', 'reconciliation_reports', ['batch_id'], unique=True)

    op.create_table('business_invoices',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('batch_id', sa.String(length=36), nullable=False),
        sa.Column('business_id', sa.String(length=36), nullable=False),
        sa.Column('invoice_number', sa.String(length=32), nullable=False),
        sa.Column('total_rewards_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('admin_fee_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total_amount_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['batch_id'], ['payment_batches.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_number')
    )
    op.create_index('ix_business_invoices_batch_id', 'business_invoices', ['batch_id'], unique=False)
    op.create_index('ix_business_invoices_business_id', 'business_invoices', ['business_id'], unique=False)
    op.create_index('ix_business_invoices_batch_business', 'business_invoices', ['batch_id', 'business_id'], unique=False)


def downgrade():
    op.drop_index('ix_business_invoices_batch_business', table_name='business_invoices')
    op.drop_index('ix_business_invoices_business_id', table_name='business_invoices')
    op.drop_index('ix_business_invoices_batch_id', table_name='business_invoices')
    op.drop_table('business_invoices')
    op.drop_index('ix_reconciliation_reports_batch_id', table_name='reconciliation_reports')
    op.drop_table('reconciliation_reports')
