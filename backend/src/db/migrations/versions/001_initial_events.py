"""Initial events schema

Revision ID: 001_initial_events
Revises:
Create Date: 2026-10-19

Creates events and event_participants tables with:
- Events table with UUIDv7 external identifier and optimistic-lock version
- Check constraints on capacity and the status vocabulary
- Event participants table (snapshot of student identity per registration)
- Unique (event_id, student_id) so a student registers once per event
- Foreign key relationship (event_participants.event_id -> events.id, CASCADE)
- Indexes for query performance
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_initial_events'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Create events and event_participants tables.

    Tables:
    - events: Campus events with capacity, deadline and status
    - event_participants: Registrations owned by an event
    """

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            'uuid',
            postgresql.UUID(as_uuid=True).with_variant(sa.LargeBinary(16), 'sqlite'),
            nullable=False
        ),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=200), nullable=False),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('time', sa.String(length=20), nullable=True),
        sa.Column('max_participants', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('registration_deadline', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='upcoming'),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('max_participants >= 1', name='ck_events_max_participants_positive'),
        sa.CheckConstraint(
            "status IN ('upcoming', 'ongoing', 'completed', 'cancelled')",
            name='ck_events_status_valid'
        ),
    )
    op.create_index('ix_events_uuid', 'events', ['uuid'], unique=True)
    op.create_index('ix_events_event_date', 'events', ['event_date'])

    op.create_table(
        'event_participants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('registered_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('event_id', 'student_id', name='uq_event_participant_student'),
    )
    op.create_index('ix_event_participants_event_id', 'event_participants', ['event_id'])
    op.create_index('ix_event_participants_student_id', 'event_participants', ['student_id'])


def downgrade() -> None:
    """Drop event_participants and events tables."""
    op.drop_index('ix_event_participants_student_id', table_name='event_participants')
    op.drop_index('ix_event_participants_event_id', table_name='event_participants')
    op.drop_table('event_participants')

    op.drop_index('ix_events_event_date', table_name='events')
    op.drop_index('ix_events_uuid', table_name='events')
    op.drop_table('events')
