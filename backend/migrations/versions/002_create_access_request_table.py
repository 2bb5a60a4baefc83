"""Create access_request table

Revision ID: 002
Revises: 001
Create Date: 2026-10-16 11:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'access_request',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('record_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('type', sa.Text(), nullable=False),

        # Status and state machine
        sa.Column('status', sa.Text(), nullable=False, server_default='NEW'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),  # Optimistic locking
        sa.Column('rejection_reason', sa.Text(), nullable=True),

        # Decision stamp (APPROVED/REJECTED)
        sa.Column('processed_by_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('processed_at', sa.TIMESTAMP(timezone=True), nullable=True),

        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['record_id'], ['record.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['processed_by_id'], ['user.id'], ondelete='RESTRICT'),
        sa.CheckConstraint("type IN ('VIEW', 'SCAN')", name='ck_access_request_type'),
        sa.CheckConstraint(
            "status IN ('NEW', 'IN_PROGRESS', 'APPROVED', 'REJECTED', 'COMPLETED')",
            name='ck_access_request_status'
        ),
        sa.CheckConstraint(
            "(status = 'REJECTED' AND rejection_reason IS NOT NULL "
            "AND length(trim(rejection_reason)) > 0) "
            "OR (status <> 'REJECTED' AND rejection_reason IS NULL)",
            name='ck_access_request_rejection_reason'
        ),
        sa.CheckConstraint(
            "(processed_by_id IS NULL AND processed_at IS NULL) "
            "OR (processed_by_id IS NOT NULL AND processed_at IS NOT NULL)",
            name='ck_access_request_processed_pair'
        )
    )

    op.create_index(
        'ix_access_request_record_user_status',
        'access_request',
        ['record_id', 'user_id', 'status']
    )
    op.create_index(
        'ix_access_request_user_created_at',
        'access_request',
        ['user_id', 'created_at']
    )


def downgrade():
    op.drop_index('ix_access_request_user_created_at', table_name='access_request')
    op.drop_index('ix_access_request_record_user_status', table_name='access_request')
    op.drop_table('access_request')
