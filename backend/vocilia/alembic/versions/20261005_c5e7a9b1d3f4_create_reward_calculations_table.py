"""create_reward_calculations_table

Revision ID: c5e7a9b1d3f4
Revises: b4d6f8a0c2e3
Create Date: 2026-10-05 09:31:57.880145

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c5e7a9b1d3f4'
down_revision = 'b4d6f8a0c2e3'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('reward_calculations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('feedback_id', sa.String(length=36), nullable=False),
        sa.Column('store_id', sa.String(length=36), nullable=False),
        sa.Column('business_id', sa.String(length=36), nullable=False),
        sa.Column('customer_phone', sa.String(length=20), nullable=False),
        sa.Column('transaction_amount_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('has_detailed_feedback', sa.Boolean(), nullable=False),
        sa.Column('sentiment_score', sa.Numeric(precision=4, scale=3), nullable=False),
        sa.Column('reward_percentage', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('reward_amount_sek', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('verified_by_business', sa.Boolean(), nullable=False),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('claimed_batch_id', sa.String(length=36), nullable=True),
        sa.Column('payment_transaction_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['claimed_batch_id'], ['payment_batches.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['payment_transaction_id'], ['payment_transactions.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reward_calculations_feedback_id', 'reward_calculations', ['feedback_id'], unique=True)
    op.create_index('ix_reward_calculations_store_id', 'reward_calculations', ['store_id'], unique=False)
    op.create_index('ix_reward_calculations_business_id', 'reward_calculations', ['business_id'], unique=False)
    op.create_index('ix_reward_calculations_customer_phone', 'reward_calculations', ['customer_phone'], unique=False)
    op.create_index('ix_reward_calculations_claimed_batch_id', 'reward_calculations', ['claimed_batch_id'], unique=False)
    op.create_index('ix_reward_calculations_payment_transaction_id', 'reward_calculations', ['payment_transaction_id'], unique=False)


def downgrade():
    op.drop_index('ix_reward_calculations_payment_transaction_id', table_name='reward_calculations')
    op.drop_index('ix_reward_calculations_claimed_batch_id', table_name='reward_calculations')
    op.drop_index('ix_reward_calculations_customer_phone', table_name='reward_calculations')
    op.drop_index('ix_reward_calculations_business_id', table_name='reward_calculations')
    op.drop_index('ix_reward_calculations_store_id', table_name='reward_calculations')
    op.drop_index('ix_reward_calculations_feedback_id', table_name='reward_calculations')
    op.drop_table('reward_calculations')
