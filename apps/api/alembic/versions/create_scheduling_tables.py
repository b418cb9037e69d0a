"""create session candidate, audit log, account role and user token tables

Revision ID: create_scheduling_tables
Revises:
Create Date: 2026-01-10 21:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_scheduling_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    time_slot = sa.Enum('21:00-23:00', '22:00-24:00', name='time_slot')
    candidate_status = sa.Enum('submitted', 'confirmed', name='candidate_status')
    account_role_type = sa.Enum('instructor', 'admin', name='account_role_type')

    op.create_table(
        'session_candidates',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('instructor_id', sa.String(), nullable=False),
        sa.Column('instructor_name', sa.String(), nullable=False),
        sa.Column('month', sa.String(length=7), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time_slot', time_slot, nullable=False),
        sa.Column('memo', sa.Text(), nullable=True),
        sa.Column('status', candidate_status, nullable=False, server_default='submitted'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('google_calendar_event_id', sa.String(), nullable=True),
        sa.Column('admin_google_calendar_event_id', sa.String(), nullable=True),
        sa.Column('admin_calendar_user_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "(status = 'confirmed') = (confirmed_at IS NOT NULL)",
            name='ck_session_candidates_confirmed_at',
        ),
    )
    op.create_index(op.f('ix_session_candidates_instructor_id'), 'session_candidates', ['instructor_id'], unique=False)
    op.create_index(op.f('ix_session_candidates_month'), 'session_candidates', ['month'], unique=False)
    op.create_index(op.f('ix_session_candidates_date'), 'session_candidates', ['date'], unique=False)
    op.create_index(op.f('ix_session_candidates_status'), 'session_candidates', ['status'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('event_id', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('admin_id', sa.String(), nullable=False),
        sa.Column('admin_name', sa.String(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('event_time_slot', sa.String(), nullable=False),
        sa.Column('instructor_id', sa.String(), nullable=False),
        sa.Column('instructor_name', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_logs_event_id'), 'audit_logs', ['event_id'], unique=False)
    op.create_index(op.f('ix_audit_logs_timestamp'), 'audit_logs', ['timestamp'], unique=False)

    op.create_table(
        'account_roles',
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', account_role_type, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('email'),
    )

    op.create_table(
        'user_tokens',
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('user_id'),
    )
    op.create_index(op.f('ix_user_tokens_email'), 'user_tokens', ['email'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_user_tokens_email'), table_name='user_tokens')
    op.drop_table('user_tokens')
    op.drop_table('account_roles')
    op.drop_index(op.f('ix_audit_logs_timestamp'), table_name='audit_logs')
    op.drop_index(op.f('ix_audit_logs_event_id'), table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index(op.f('ix_session_candidates_status'), table_name='session_candidates')
    op.drop_index(op.f('ix_session_candidates_date'), table_name='session_candidates')
    op.drop_index(op.f('ix_session_candidates_month'), table_name='session_candidates')
    op.drop_index(op.f('ix_session_candidates_instructor_id'), table_name='session_candidates')
    op.drop_table('session_candidates')
    sa.Enum(name='account_role_type').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='candidate_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='time_slot').drop(op.get_bind(), checkfirst=True)
