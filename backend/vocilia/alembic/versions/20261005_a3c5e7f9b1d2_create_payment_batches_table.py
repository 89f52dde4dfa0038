"""create_payment_batches_table

Revision ID: a3c5e7f9b1d2
Revises:
Create Date: 2026-10-05 09:12:44.101532

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a3c5e7f9b1d2'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('payment_batches',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('batch_week', sa.String(length=8), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=False),
        sa.Column('week_end', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_customers', sa.Integer(), nullable=False),
        sa.Column('total_amount_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('successful_payments', sa.Integer(), nullable=False),
        sa.Column('failed_payments', sa.Integer(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payment_batches_batch_week', 'payment_batches', ['batch_week'], unique=True)


def downgrade():
    op.drop_index('ix_payment_batches_batch_week', table_name='payment_batches')
    op.drop_table('payment_batches')
