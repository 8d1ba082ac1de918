"""001_initial_schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

Initial schema for the golf social backend:
- users
- user_connections (one row per unordered pair of users)
- direct_messages
- tee_times, tee_time_applications
- golf_rounds, golf_round_details
- user_achievements
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )
    op.create_index('idx_users_username', 'users', ['username'])

    op.create_table(
        'user_connections',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('requester_id', sa.Integer(), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('user_low_id', sa.Integer(), nullable=False),
        sa.Column('user_high_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['requester_id'], ['users.id']),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_low_id', 'user_high_id', name='uq_user_connections_pair'),
        sa.CheckConstraint('user_low_id < user_high_id', name='ck_user_connections_pair_order'),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')", name='ck_user_connections_status'
        ),
    )
    op.create_index('idx_user_connections_requester', 'user_connections', ['requester_id'])
    op.create_index(
        'idx_user_connections_recipient_status', 'user_connections', ['recipient_id', 'status']
    )

    op.create_table(
        'direct_messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id']),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('length(trim(message)) > 0', name='ck_direct_messages_not_blank'),
    )
    op.create_index(
        'idx_direct_messages_pair_created',
        'direct_messages',
        ['sender_id', 'recipient_id', 'created_at'],
    )
    op.create_index(
        'idx_direct_messages_recipient_unread', 'direct_messages', ['recipient_id', 'is_read']
    )

    op.create_table(
        'tee_times',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('course_name', sa.String(), nullable=False),
        sa.Column('tee_time_date', sa.Date(), nullable=False),
        sa.Column('tee_time_time', sa.Time(), nullable=False),
        sa.Column('max_players', sa.Integer(), nullable=False),
        sa.Column('available_spots', sa.Integer(), nullable=False),
        sa.Column('handicap_requirement', sa.String(), nullable=False, server_default='Any level'),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('max_players >= 1', name='ck_tee_times_max_players'),
        sa.CheckConstraint(
            'available_spots >= 0 AND available_spots <= max_players',
            name='ck_tee_times_available_spots',
        ),
        sa.CheckConstraint(
            "status IN ('active', 'full', 'cancelled')", name='ck_tee_times_status'
        ),
    )
    op.create_index('idx_tee_times_status_date', 'tee_times', ['status', 'tee_time_date'])
    op.create_index('idx_tee_times_creator', 'tee_times', ['creator_id'])

    op.create_table(
        'tee_time_applications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tee_time_id', sa.Integer(), nullable=False),
        sa.Column('applicant_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['tee_time_id'], ['tee_times.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['applicant_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'tee_time_id', 'applicant_id', name='uq_tee_time_applications_tee_time_applicant'
        ),
    )
    op.create_index(
        'idx_tee_time_applications_tee_time_status',
        'tee_time_applications',
        ['tee_time_id', 'status'],
    )
    op.create_index(
        'idx_tee_time_applications_applicant', 'tee_time_applications', ['applicant_id']
    )

    op.create_table(
        'golf_rounds',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('course_id', sa.Integer(), nullable=True),
        sa.Column('course_name', sa.String(), nullable=False),
        sa.Column('date_played', sa.Date(), nullable=False),
        sa.Column('total_score', sa.Integer(), nullable=True),
        sa.Column('par', sa.Integer(), nullable=True),
        sa.Column('holes_played', sa.Integer(), nullable=True),
        sa.Column('weather_conditions', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_golf_rounds_user_date', 'golf_rounds', ['user_id', 'date_played'])

    op.create_table(
        'golf_round_details',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('round_id', sa.Integer(), nullable=False),
        sa.Column('hole_number', sa.Integer(), nullable=False),
        sa.Column('par', sa.Integer(), nullable=True),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('putts', sa.Integer(), nullable=True),
        sa.Column('fairway_hit', sa.Boolean(), nullable=True),
        sa.Column('green_in_regulation', sa.Boolean(), nullable=True),
        sa.Column('sand_saves', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['round_id'], ['golf_rounds.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('round_id', 'hole_number', name='uq_golf_round_details_round_hole'),
    )

    op.create_table(
        'user_achievements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('achievement_type', sa.String(length=50), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'achievement_type', name='uq_user_achievements_user_type'),
        sa.CheckConstraint('value >= 0', name='ck_user_achievements_value'),
    )


def downgrade() -> None:
    op.drop_table('user_achievements')
    op.drop_table('golf_round_details')
    op.drop_index('idx_golf_rounds_user_date', table_name='golf_rounds')
    op.drop_table('golf_rounds')
    op.drop_index('idx_tee_time_applications_applicant', table_name='tee_time_applications')
    op.drop_index('idx_tee_time_applications_tee_time_status', table_name='tee_time_applications')
    op.drop_table('tee_time_applications')
    op.drop_index('idx_tee_times_creator', table_name='tee_times')
    op.drop_index('idx_tee_times_status_date', table_name='tee_times')
    op.drop_table('tee_times')
    op.drop_index('idx_direct_messages_recipient_unread', table_name='direct_messages')
    op.drop_index('idx_direct_messages_pair_created', table_name='direct_messages')
    op.drop_table('direct_messages')
    op.drop_index('idx_user_connections_recipient_status', table_name='user_connections')
    op.drop_index('idx_user_connections_requester', table_name='user_connections')
    op.drop_table('user_connections')
    op.drop_index('idx_users_username', table_name='users')
    op.drop_table('users')
