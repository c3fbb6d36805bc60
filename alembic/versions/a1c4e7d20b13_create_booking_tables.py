"""create booking tables

Revision ID: a1c4e7d20b13
Revises:
Create Date: 2026-10-19 09:12:44.201517

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'a1c4e7d20b13'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OWNER_TYPE = postgresql.ENUM('INDIVIDUAL', 'ADMIN', 'CORPORATE', name='ownertype', create_type=False)
AVAILABILITY_TYPE = postgresql.ENUM(
    'RECURRING_WEEKLY', 'DATE_RANGE', 'SPECIFIC_DATE', name='availabilitytype', create_type=False
)
RESERVATION_STATUS = postgresql.ENUM(
    'PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', name='reservationstatus', create_type=False
)


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    OWNER_TYPE.create(bind, checkfirst=True)
    AVAILABILITY_TYPE.create(bind, checkfirst=True)
    RESERVATION_STATUS.create(bind, checkfirst=True)

    # 1. users
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('surname', sa.String(100), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_phone', 'users', ['phone'])

    # 2. owners
    op.create_table(
        'owners',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('surname', sa.String(100), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('owner_type', OWNER_TYPE, nullable=False, server_default='INDIVIDUAL'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
    )
    op.create_index('ix_owners_email', 'owners', ['email'], unique=True)
    op.create_index('ix_owners_phone', 'owners', ['phone'])
    op.create_index('ix_owners_owner_type', 'owners', ['owner_type'])

    # 3. businesses
    op.create_table(
        'businesses',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('owners.id'), nullable=False),
        sa.Column('place_id', sa.String(255), nullable=True),
        sa.Column('address', sa.String(200), nullable=True),
        sa.Column('latitude', sa.Float, nullable=True),
        sa.Column('longitude', sa.Float, nullable=True),
        sa.Column('timezone', sa.String(50), nullable=False, server_default='UTC'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.text('true'))
    )
    op.create_index('ix_businesses_name', 'businesses', ['name'])
    op.create_index('ix_businesses_owner_id', 'businesses', ['owner_id'])
    op.create_index('ix_businesses_place_id', 'businesses', ['place_id'])

    # 4. reservation_settings (one row per business)
    op.create_table(
        'reservation_settings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('business_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('slot_duration_minutes', sa.Integer, nullable=False, server_default='30'),
        sa.Column('buffer_minutes', sa.Integer, nullable=False, server_default='0'),
        sa.Column('min_advance_booking_hours', sa.Integer, nullable=False, server_default='2'),
        sa.Column('max_advance_booking_days', sa.Integer, nullable=False, server_default='30'),
        sa.Column('cancellation_window_hours', sa.Integer, nullable=False, server_default='0'),
        sa.Column('accept_reservations', sa.Boolean, nullable=False, server_default=sa.text('true')),
        sa.Column('auto_confirm', sa.Boolean, nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('slot_duration_minutes > 0', name='ck_settings_slot_duration'),
        sa.CheckConstraint('buffer_minutes >= 0', name='ck_settings_buffer')
    )
    op.create_index('ix_reservation_settings_business_id', 'reservation_settings', ['business_id'], unique=True)

    # 5. business_availability
    op.create_table(
        'business_availability',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('business_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('businesses.id'), nullable=False),
        sa.Column('availability_type', AVAILABILITY_TYPE, nullable=False),
        sa.Column('day_of_week', sa.Integer, nullable=True),
        sa.Column('start_date', sa.Date, nullable=True),
        sa.Column('end_date', sa.Date, nullable=True),
        sa.Column('specific_date', sa.Date, nullable=True),
        sa.Column('start_time', sa.Time, nullable=True),
        sa.Column('end_time', sa.Time, nullable=True),
        sa.Column('is_closed', sa.Boolean, nullable=False, server_default=sa.text('false')),
        sa.Column('blocked_windows', sa.JSON, nullable=False, server_default=sa.text("'[]'")),
        sa.Column('block_reason', sa.String, nullable=True),
        sa.Column('priority', sa.Integer, nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.text('true')),
        sa.Column('superseded_by_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('business_availability.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint(
            'start_date IS NULL OR end_date IS NULL OR start_date <= end_date',
            name='ck_availability_date_range'
        ),
        sa.CheckConstraint(
            'start_time IS NULL OR end_time IS NULL OR start_time < end_time',
            name='ck_availability_open_hours'
        )
    )
    op.create_index('ix_business_availability_business_id', 'business_availability', ['business_id'])
    op.create_index('ix_business_availability_availability_type', 'business_availability', ['availability_type'])
    op.create_index('ix_business_availability_day_of_week', 'business_availability', ['day_of_week'])
    op.create_index('ix_business_availability_specific_date', 'business_availability', ['specific_date'])
    op.create_index('ix_business_availability_is_active', 'business_availability', ['is_active'])
    op.create_index('ix_availability_date_range', 'business_availability', ['start_date', 'end_date'])
    op.create_index('ix_availability_weekly', 'business_availability', ['business_id', 'availability_type', 'day_of_week'])
    op.create_index('ix_availability_date', 'business_availability', ['business_id', 'specific_date'])

    # 6. reservations
    op.create_table(
        'reservations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('business_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('businesses.id'), nullable=False),
        sa.Column('reservation_date', sa.Date, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('status', RESERVATION_STATUS, nullable=False, server_default='PENDING'),
        sa.Column('is_confirmed', sa.Boolean, nullable=False, server_default=sa.text('false')),
        sa.Column('is_cancelled', sa.Boolean, nullable=False, server_default=sa.text('false')),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('cancellation_reason', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('start_time < end_time', name='ck_reservation_time_slot'),
        sa.CheckConstraint("is_cancelled = (status = 'CANCELLED')", name='ck_reservation_cancelled_flag'),
        sa.CheckConstraint(
            "is_confirmed = (status IN ('CONFIRMED', 'COMPLETED'))",
            name='ck_reservation_confirmed_flag'
        )
    )
    op.create_index('ix_reservations_user_id', 'reservations', ['user_id'])
    op.create_index('ix_reservations_business_id', 'reservations', ['business_id'])
    op.create_index('ix_reservations_reservation_date', 'reservations', ['reservation_date'])
    op.create_index('ix_reservations_status', 'reservations', ['status'])
    op.create_index('ix_reservations_is_confirmed', 'reservations', ['is_confirmed'])
    op.create_index('ix_reservations_is_cancelled', 'reservations', ['is_cancelled'])
    op.create_index('ix_reservations_created_at', 'reservations', ['created_at'])
    op.create_index('ix_reservation_user_date', 'reservations', ['user_id', 'reservation_date'])
    op.create_index('ix_reservation_business_date', 'reservations', ['business_id', 'reservation_date'])

    # At most one live reservation per slot; cancelled rows release it
    op.create_index(
        'uq_reservation_active_slot',
        'reservations',
        ['business_id', 'reservation_date', 'start_time'],
        unique=True,
        postgresql_where=sa.text('NOT is_cancelled')
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('uq_reservation_active_slot', table_name='reservations')
    op.drop_table('reservations')
    op.drop_table('business_availability')
    op.drop_table('reservation_settings')
    op.drop_table('businesses')
    op.drop_table('owners')
    op.drop_table('users')

    bind = op.get_bind()
    RESERVATION_STATUS.drop(bind, checkfirst=True)
    AVAILABILITY_TYPE.drop(bind, checkfirst=True)
    OWNER_TYPE.drop(bind, checkfirst=True)
