"""create_dj_session_tables

Revision ID: 7c1f0e2a9b3d
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c1f0e2a9b3d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


session_status = sa.Enum('ACTIVE', 'ENDED', name='sessionstatus')
vote_type = sa.Enum('UPVOTE', 'DOWNVOTE', name='votetype')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'rooms',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('is_private', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('created_by_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_rooms_created_by_id', 'rooms', ['created_by_id'])

    op.create_table(
        'room_memberships',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('room_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('joined_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('room_id', 'user_id', name='unique_room_membership'),
    )
    op.create_index('ix_room_memberships_room_id', 'room_memberships', ['room_id'])
    op.create_index('ix_room_memberships_user_id', 'room_memberships', ['user_id'])

    # now_playing_item_id gets its foreign key once queue_items exists
    op.create_table(
        'dj_sessions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('room_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('is_private', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('host_id', sa.String(), nullable=False),
        sa.Column('current_dj_id', sa.String(), nullable=True),
        sa.Column('status', session_status, nullable=False),
        sa.Column('now_playing_ref', sa.JSON(), nullable=True),
        sa.Column('now_playing_start', sa.DateTime(), nullable=True),
        sa.Column('now_playing_item_id', sa.String(), nullable=True),
        sa.Column('genre', sa.String(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('last_position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_dj_sessions_room_id', 'dj_sessions', ['room_id'])
    op.create_index('ix_dj_sessions_host_id', 'dj_sessions', ['host_id'])
    op.create_index('ix_dj_sessions_status', 'dj_sessions', ['status'])
    op.create_index(
        'unique_active_session_per_room',
        'dj_sessions',
        ['room_id'],
        unique=True,
        sqlite_where=sa.text("status = 'ACTIVE'"),
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        'queue_items',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('session_id', sa.String(), nullable=False),
        sa.Column('added_by_user_id', sa.String(), nullable=False),
        sa.Column('track_ref', sa.JSON(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('upvotes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('downvotes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('played_at', sa.DateTime(), nullable=True),
        sa.Column('skipped', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('added_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['session_id'], ['dj_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'position', name='unique_session_position'),
    )
    op.create_index('ix_queue_items_session_id', 'queue_items', ['session_id'])

    bind = op.get_bind()
    if bind.dialect.name != 'sqlite':
        op.create_foreign_key(
            'fk_dj_sessions_now_playing_item',
            'dj_sessions',
            'queue_items',
            ['now_playing_item_id'],
            ['id'],
            ondelete='SET NULL',
        )

    op.create_table(
        'votes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('queue_item_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('vote_type', vote_type, nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['queue_item_id'], ['queue_items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('queue_item_id', 'user_id', name='unique_queue_item_vote'),
    )
    op.create_index('ix_votes_queue_item_id', 'votes', ['queue_item_id'])
    op.create_index('ix_votes_user_id', 'votes', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('votes')
    bind = op.get_bind()
    if bind.dialect.name != 'sqlite':
        op.drop_constraint('fk_dj_sessions_now_playing_item', 'dj_sessions', type_='foreignkey')
    op.drop_table('queue_items')
    op.drop_table('dj_sessions')
    op.drop_table('room_memberships')
    op.drop_table('rooms')
    if bind.dialect.name == 'postgresql':
        vote_type.drop(bind, checkfirst=True)
        session_status.drop(bind, checkfirst=True)
