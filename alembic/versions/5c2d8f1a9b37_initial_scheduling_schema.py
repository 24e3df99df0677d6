"""initial scheduling schema

Revision ID: 5c2d8f1a9b37
Revises:
Create Date: 2026-10-18 09:12:41.518220

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c2d8f1a9b37'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Global settings (single row)
    op.create_table(
        'app_settings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('brand_name', sa.String(100)),
        sa.Column('greeting_message', sa.Text),
        sa.Column('greeting_message_new_customer', sa.Text),
        sa.Column('greeting_message_returning_customer', sa.Text),
        sa.Column('suggested_questions', sa.JSON),
        sa.Column('number_of_staff', sa.Integer),
        sa.Column('default_service_duration_minutes', sa.Integer),
        sa.Column('working_hours', sa.JSON),
        sa.Column('weekly_off_days', sa.JSON),
        sa.Column('one_time_off_dates', sa.JSON),
        sa.Column('specific_day_rules', sa.JSON),
        sa.Column('break_times', sa.JSON),
        sa.Column('out_of_office_enabled', sa.Boolean, server_default=sa.false()),
        sa.Column('out_of_office_message', sa.Text),
        sa.Column('office_hours_start', sa.String(5)),
        sa.Column('office_hours_end', sa.String(5)),
        sa.Column('appointment_reminder_enabled', sa.Boolean, server_default=sa.true()),
        sa.Column('appointment_reminder_time', sa.String(5), server_default='09:00'),
        sa.Column('appointment_reminder_days_before', sa.Integer, server_default='1'),
        sa.Column('appointment_reminder_message_template', sa.Text),
        sa.Column('successful_booking_message_template', sa.Text),
        *_timestamps(),
    )

    # 2. Staff
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(20), nullable=False, unique=True),
        sa.Column('role', sa.String(20), server_default='staff'),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )

    # 3. Branches and products (scheduling scopes)
    op.create_table(
        'branches',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('address', sa.String(500)),
        sa.Column('contact_info', sa.String(255)),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('working_hours', sa.JSON),
        sa.Column('off_days', sa.JSON),
        sa.Column('number_of_staff', sa.Integer),
        sa.Column('specific_day_overrides', sa.JSON),
        *_timestamps(),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('price', sa.Numeric(12, 2), server_default='0'),
        sa.Column('category', sa.String(100)),
        sa.Column('type', sa.String(20), server_default='service'),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('is_schedulable', sa.Boolean, server_default=sa.true()),
        sa.Column('scheduling_rules', sa.JSON),
        sa.Column('default_sessions', sa.Integer),
        sa.Column('expiry_days', sa.Integer),
        sa.Column('expiry_reminder_template', sa.Text),
        sa.Column('expiry_reminder_days_before', sa.Integer, server_default='3'),
        *_timestamps(),
    )

    # 4. Customers and conversations
    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('phone_number', sa.String(20), nullable=False, unique=True),
        sa.Column('name', sa.String(255)),
        sa.Column('internal_name', sa.String(255)),
        sa.Column('tags', sa.JSON),
        sa.Column('assigned_staff_id', sa.Uuid(), sa.ForeignKey('users.id')),
        sa.Column('last_interaction_at', sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index('ix_customers_phone_number', 'customers', ['phone_number'])

    op.create_table(
        'conversations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('status', sa.String(20), server_default='open'),
        sa.Column('title', sa.String(255)),
        sa.Column('last_message_at', sa.DateTime(timezone=True)),
        sa.Column('last_message_preview', sa.String(100)),
        *_timestamps(),
    )
    op.create_index('ix_conversations_customer_updated', 'conversations', ['customer_id', 'updated_at'])

    op.create_table(
        'messages',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('conversation_id', sa.Uuid(), sa.ForeignKey('conversations.id'), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id')),
        sa.Column('sender', sa.String(20), nullable=False),
        sa.Column('type', sa.String(20), server_default='text'),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('is_read', sa.Boolean, server_default=sa.false()),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_messages_conversation_id', 'messages', ['conversation_id'])

    # 5. Session packages
    op.create_table(
        'customer_products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('staff_id', sa.Uuid(), sa.ForeignKey('users.id')),
        sa.Column('product_name', sa.String(255), nullable=False),
        sa.Column('total_sessions', sa.Integer, nullable=False, server_default='0'),
        sa.Column('used_sessions', sa.Integer, nullable=False, server_default='0'),
        sa.Column('remaining_sessions', sa.Integer, nullable=False, server_default='0'),
        sa.Column('assigned_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('expiry_days', sa.Integer),
        sa.Column('expiry_date', sa.DateTime(timezone=True)),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('last_used_date', sa.DateTime(timezone=True)),
        sa.Column('notes', sa.Text),
        *_timestamps(),
        sa.CheckConstraint('used_sessions >= 0 AND total_sessions >= 0 AND remaining_sessions >= 0',
                           name='ck_customer_products_non_negative'),
    )
    op.create_index('ix_customer_products_customer_id', 'customer_products', ['customer_id'])
    op.create_index('ix_customer_products_product_id', 'customer_products', ['product_id'])
    op.create_index('ix_customer_products_expiry_date', 'customer_products', ['expiry_date'])
    op.create_index('ix_customer_products_customer_active', 'customer_products', ['customer_id', 'is_active'])
    op.create_index('ix_customer_products_expiry_active', 'customer_products', ['expiry_date', 'is_active'])

    # 6. Appointments
    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('branch_id', sa.Uuid(), sa.ForeignKey('branches.id')),
        sa.Column('staff_id', sa.Uuid(), sa.ForeignKey('users.id')),
        sa.Column('customer_product_id', sa.Uuid(),
                  sa.ForeignKey('customer_products.id', ondelete='SET NULL')),
        sa.Column('service', sa.String(255), nullable=False),
        sa.Column('date', sa.String(10), nullable=False),
        sa.Column('time', sa.String(5), nullable=False),
        sa.Column('duration_minutes', sa.Integer),
        sa.Column('notes', sa.Text),
        sa.Column('status', sa.String(30), server_default='booked'),
        sa.Column('recurrence_type', sa.String(10), server_default='none'),
        sa.Column('recurrence_count', sa.Integer, server_default='1'),
        sa.Column('is_standalone_session', sa.Boolean, server_default=sa.false()),
        sa.Column('is_session_used', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('session_used_at', sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.Column('cancelled_at', sa.DateTime(timezone=True)),
        sa.Column('cancellation_reason', sa.Text),
    )
    op.create_index('ix_appointments_customer_id', 'appointments', ['customer_id'])
    op.create_index('ix_appointments_date_product', 'appointments', ['date', 'product_id'])

    # 7. Reminders
    op.create_table(
        'appointment_reminders',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reminder_type', sa.String(20), nullable=False, server_default='appointment'),
        sa.Column('appointment_id', sa.Uuid(), sa.ForeignKey('appointments.id')),
        sa.Column('customer_product_id', sa.Uuid(),
                  sa.ForeignKey('customer_products.id', ondelete='SET NULL')),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('scheduled_for', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True)),
        sa.Column('status', sa.String(10), nullable=False, server_default='pending'),
        sa.Column('error_message', sa.Text),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_appointment_reminders_appointment_id', 'appointment_reminders', ['appointment_id'])
    op.create_index('ix_appointment_reminders_customer_product_id', 'appointment_reminders', ['customer_product_id'])
    op.create_index('ix_appointment_reminders_customer_id', 'appointment_reminders', ['customer_id'])
    op.create_index('ix_appointment_reminders_status_scheduled', 'appointment_reminders',
                    ['status', 'scheduled_for'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('appointment_reminders')
    op.drop_table('appointments')
    op.drop_table('customer_products')
    op.drop_table('messages')
    op.drop_table('conversations')
    op.drop_table('customers')
    op.drop_table('products')
    op.drop_table('branches')
    op.drop_table('users')
    op.drop_table('app_settings')
