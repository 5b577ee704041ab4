"""create booking tables

Revision ID: 5c1f0a7d2b34
Revises:
Create Date: 2026-10-19 10:12:41.508213

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1f0a7d2b34'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

appointment_status = sa.Enum(
    'PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED', 'NO_SHOW', name='appointmentstatus'
)
cancelled_by = sa.Enum('CUSTOMER', 'BUSINESS', 'SYSTEM', name='cancelledby')
notification_kind = sa.Enum(
    'CONFIRMATION', 'CANCELLATION', 'REMINDER', 'MODIFICATION', name='notificationkind'
)
notification_channel = sa.Enum('EMAIL', 'SMS', name='notificationchannel')
notification_status = sa.Enum('PENDING', 'SENT', 'FAILED', name='notificationstatus')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    # 1. businesses
    op.create_table(
        'businesses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('timezone', sa.String(50), nullable=True),
        *_timestamps(),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_businesses_slug', 'businesses', ['slug'], unique=True)

    # 2. services
    op.create_table(
        'services',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_services_business_id', 'services', ['business_id'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])

    # 3. customers
    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('total_appointments', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_appointment_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('business_id', 'phone', name='uq_customers_business_phone'),
    )
    op.create_index('ix_customers_business_id', 'customers', ['business_id'])
    op.create_index('ix_customers_email', 'customers', ['email'])

    # 4. weekly_schedules
    op.create_table(
        'weekly_schedules',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('slot_duration_minutes', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('business_id', 'day_of_week', name='uq_weekly_schedules_business_day'),
        sa.CheckConstraint('start_time < end_time', name='ck_weekly_schedules_time_order'),
        sa.CheckConstraint('slot_duration_minutes BETWEEN 5 AND 240', name='ck_weekly_schedules_slot_duration'),
    )
    op.create_index('ix_weekly_schedules_business_id', 'weekly_schedules', ['business_id'])

    # 5. schedule_exceptions
    op.create_table(
        'schedule_exceptions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('exception_date', sa.Date(), nullable=False),
        sa.Column('is_closed', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('reason', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.UniqueConstraint('business_id', 'exception_date', name='uq_schedule_exceptions_business_date'),
    )
    op.create_index('ix_schedule_exceptions_business_id', 'schedule_exceptions', ['business_id'])

    # 6. business_holidays
    op.create_table(
        'business_holidays',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('start_date <= end_date', name='ck_business_holidays_date_order'),
    )
    op.create_index('idx_business_holidays_dates', 'business_holidays', ['business_id', 'start_date', 'end_date'])

    # 7. appointments
    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Uuid(), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('appointment_datetime', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('service_name', sa.String(200), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', appointment_status, nullable=False),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('cancelled_by', cancelled_by, nullable=True),
        sa.Column('cancellation_token', sa.String(128), nullable=False),
        sa.Column('cancellation_token_expires_at', sa.DateTime(), nullable=False),
        sa.Column('reminder_sent_at', sa.DateTime(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_appointments_service_id', 'appointments', ['service_id'])
    op.create_index('ix_appointments_customer_id', 'appointments', ['customer_id'])
    op.create_index('ix_appointments_cancellation_token', 'appointments', ['cancellation_token'], unique=True)
    op.create_index('idx_appointments_business_datetime', 'appointments', ['business_id', 'appointment_datetime'])
    op.create_index('idx_appointments_status_datetime', 'appointments', ['status', 'appointment_datetime'])

    # 8. notifications (outbox)
    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('appointment_id', sa.Uuid(), sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('kind', notification_kind, nullable=False),
        sa.Column('channel', notification_channel, nullable=False),
        sa.Column('recipient', sa.String(255), nullable=False),
        sa.Column('status', notification_status, nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_notifications_appointment_id', 'notifications', ['appointment_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('notifications')
    op.drop_table('appointments')
    op.drop_table('business_holidays')
    op.drop_table('schedule_exceptions')
    op.drop_table('weekly_schedules')
    op.drop_table('customers')
    op.drop_table('services')
    op.drop_table('businesses')

    bind = op.get_bind()
    for enum_type in (
            notification_status, notification_channel, notification_kind, cancelled_by, appointment_status
    ):
        enum_type.drop(bind, checkfirst=True)
