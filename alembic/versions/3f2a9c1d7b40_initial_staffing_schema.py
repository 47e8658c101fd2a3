"""initial_staffing_schema

Revision ID: 3f2a9c1d7b40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True) -> list:
    columns = [sa.Column('created_at', sa.DateTime(timezone=True), nullable=True)]
    if updated:
        columns.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True))
    return columns


def upgrade() -> None:
    """Upgrade schema - Create identity, onboarding, events, attendance and payroll tables."""

    # Identity
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column(
            'role',
            sa.Enum(
                'vendor', 'worker', 'manager', 'supervisor', 'supervisor2', 'hr',
                'exec', 'admin', 'finance', 'backgroundchecker',
                name='user_role_enum',
            ),
            nullable=True,
        ),
        sa.Column(
            'division',
            sa.Enum('vendor', 'trailers', 'both', name='division_enum'),
            nullable=True,
        ),
        sa.Column('region_id', sa.Uuid(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=True),
        sa.Column('account_locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_temporary_password', sa.Boolean(), nullable=True),
        sa.Column('must_change_password', sa.Boolean(), nullable=True),
        sa.Column('password_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('mfa_login_code', sa.String(), nullable=True),
        sa.Column('mfa_login_code_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('background_check_completed', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('state', sa.String(length=32), nullable=True),
        sa.Column('zip_code', sa.String(length=10), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('region_id', sa.Uuid(), nullable=True),
        sa.Column('profile_photo_data', sa.Text(), nullable=True),
        sa.Column('profile_photo_type', sa.String(), nullable=True),
        sa.Column(
            'onboarding_status',
            sa.Enum('pending', 'in_progress', 'completed', name='onboarding_status_enum'),
            nullable=True,
        ),
        sa.Column('onboarding_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('mfa_secret', sa.Text(), nullable=True),
        sa.Column('mfa_enabled', sa.Boolean(), nullable=True),
        sa.Column('backup_codes', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_profiles_user_id', 'profiles', ['user_id'], unique=True)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('resource_type', sa.String(), nullable=False),
        sa.Column('success', sa.Boolean(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])

    # Onboarding
    op.create_table(
        'i9_documents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('drivers_license_url', sa.Text(), nullable=True),
        sa.Column('drivers_license_filename', sa.String(), nullable=True),
        sa.Column('drivers_license_uploaded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ssn_document_url', sa.Text(), nullable=True),
        sa.Column('ssn_document_filename', sa.String(), nullable=True),
        sa.Column('ssn_document_uploaded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('additional_doc_url', sa.Text(), nullable=True),
        sa.Column('additional_doc_filename', sa.String(), nullable=True),
        sa.Column('additional_doc_uploaded_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_i9_documents_user_id', 'i9_documents', ['user_id'], unique=True)

    op.create_table(
        'background_checks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column(
            'status',
            sa.Enum(
                'pending', 'in_progress', 'completed', 'failed',
                name='background_check_status_enum',
            ),
            nullable=True,
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('checked_by', sa.Uuid(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_background_checks_user_id', 'background_checks', ['user_id'], unique=True
    )

    # Events
    op.create_table(
        'events',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('event_name', sa.String(), nullable=False),
        sa.Column('artist', sa.String(), nullable=True),
        sa.Column('venue', sa.String(), nullable=False),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('state', sa.String(length=32), nullable=True),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('ends_next_day', sa.Boolean(), nullable=True),
        sa.Column('artist_share_percent', sa.Float(), nullable=True),
        sa.Column('venue_share_percent', sa.Float(), nullable=True),
        sa.Column('pds_share_percent', sa.Float(), nullable=True),
        sa.Column('commission_pool', sa.Float(), nullable=True),
        sa.Column('ticket_sales', sa.Float(), nullable=True),
        sa.Column('tips', sa.Float(), nullable=True),
        sa.Column('tax_rate_percent', sa.Float(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_created_by', 'events', ['created_by'])
    op.create_index('ix_events_event_date', 'events', ['event_date'])

    op.create_table(
        'event_teams',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=True),
        sa.Column('vendor_id', sa.Uuid(), nullable=False),
        sa.Column('assigned_by', sa.Uuid(), nullable=True),
        sa.Column(
            'status',
            sa.Enum(
                'pending_confirmation', 'confirmed', 'declined',
                name='team_member_status_enum',
            ),
            nullable=True,
        ),
        sa.Column('confirmation_token', sa.String(length=64), nullable=True),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'vendor_id', name='uq_event_team_vendor'),
        sa.UniqueConstraint('confirmation_token'),
    )
    op.create_index('ix_event_teams_event_id', 'event_teams', ['event_id'])
    op.create_index('ix_event_teams_vendor_id', 'event_teams', ['vendor_id'])

    op.create_table(
        'vendor_invitations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('token', sa.String(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=True),
        sa.Column('vendor_id', sa.Uuid(), nullable=False),
        sa.Column('invited_by', sa.Uuid(), nullable=False),
        sa.Column(
            'invitation_type',
            sa.Enum('bulk', 'single', name='invitation_type_enum'),
            nullable=True,
        ),
        sa.Column('availability', sa.JSON(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pending', 'accepted', 'declined', 'expired', name='invitation_status_enum'),
            nullable=True,
        ),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration_weeks', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_vendor_invitations_token', 'vendor_invitations', ['token'], unique=True)
    op.create_index('ix_vendor_invitations_event_id', 'vendor_invitations', ['event_id'])
    op.create_index('ix_vendor_invitations_status', 'vendor_invitations', ['status'])
    op.create_index('ix_vendor_invitations_vendor_id', 'vendor_invitations', ['vendor_id'])
    op.create_index('ix_vendor_invitations_invited_by', 'vendor_invitations', ['invited_by'])

    op.create_table(
        'regions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('center_lat', sa.Float(), nullable=True),
        sa.Column('center_lng', sa.Float(), nullable=True),
        sa.Column('radius_miles', sa.Float(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'venue_reference',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('venue_name', sa.String(), nullable=False),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('state', sa.String(length=32), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_venue_reference_venue_name', 'venue_reference', ['venue_name'])

    op.create_table(
        'manager_team_members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('manager_id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_manager_team_members_manager_id', 'manager_team_members', ['manager_id']
    )
    op.create_index(
        'ix_manager_team_members_member_id', 'manager_team_members', ['member_id']
    )

    # Attendance
    op.create_table(
        'checkin_codes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('label', sa.String(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('target_user_id', sa.Uuid(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_checkin_codes_code', 'checkin_codes', ['code'])
    op.create_index('ix_checkin_codes_target_user_id', 'checkin_codes', ['target_user_id'])

    op.create_table(
        'checkin_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('code_id', sa.Uuid(), nullable=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('checked_in_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['code_id'], ['checkin_codes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_checkin_logs_code_id', 'checkin_logs', ['code_id'])
    op.create_index('ix_checkin_logs_user_id', 'checkin_logs', ['user_id'])

    op.create_table(
        'time_entries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column(
            'action',
            sa.Enum(
                'clock_in', 'clock_out', 'meal_start', 'meal_end',
                name='time_entry_action_enum',
            ),
            nullable=False,
        ),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('division', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('event_id', sa.Uuid(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_time_entries_user_id', 'time_entries', ['user_id'])
    op.create_index('ix_time_entries_timestamp', 'time_entries', ['timestamp'])
    op.create_index('ix_time_entries_event_id', 'time_entries', ['event_id'])

    op.create_table(
        'geofence_zones',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column(
            'zone_type',
            sa.Enum('circle', 'polygon', name='geofence_zone_type_enum'),
            nullable=True,
        ),
        sa.Column('center_latitude', sa.Float(), nullable=True),
        sa.Column('center_longitude', sa.Float(), nullable=True),
        sa.Column('radius_meters', sa.Float(), nullable=True),
        sa.Column('polygon_coordinates', sa.JSON(), nullable=True),
        sa.Column('applies_to_roles', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'login_locations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('accuracy_meters', sa.Float(), nullable=True),
        sa.Column('within_geofence', sa.Boolean(), nullable=True),
        sa.Column('matched_zone_id', sa.Uuid(), nullable=True),
        sa.Column('distance_meters', sa.Integer(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_login_locations_user_id', 'login_locations', ['user_id'])

    # Payroll
    op.create_table(
        'event_payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=True),
        sa.Column('commission_pool_percent', sa.Float(), nullable=True),
        sa.Column('commission_pool_dollars', sa.Float(), nullable=True),
        sa.Column('total_tips', sa.Float(), nullable=True),
        sa.Column('total_regular_hours', sa.Float(), nullable=True),
        sa.Column('total_overtime_hours', sa.Float(), nullable=True),
        sa.Column('total_doubletime_hours', sa.Float(), nullable=True),
        sa.Column('total_regular_pay', sa.Float(), nullable=True),
        sa.Column('total_overtime_pay', sa.Float(), nullable=True),
        sa.Column('total_doubletime_pay', sa.Float(), nullable=True),
        sa.Column('total_commissions', sa.Float(), nullable=True),
        sa.Column('total_tips_distributed', sa.Float(), nullable=True),
        sa.Column('total_payment', sa.Float(), nullable=True),
        sa.Column('base_rate', sa.Float(), nullable=True),
        sa.Column('net_sales', sa.Float(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_event_payments_event_id', 'event_payments', ['event_id'], unique=True)

    op.create_table(
        'event_vendor_payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_payment_id', sa.Uuid(), nullable=True),
        sa.Column('event_id', sa.Uuid(), nullable=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('actual_hours', sa.Float(), nullable=True),
        sa.Column('regular_hours', sa.Float(), nullable=True),
        sa.Column('overtime_hours', sa.Float(), nullable=True),
        sa.Column('doubletime_hours', sa.Float(), nullable=True),
        sa.Column('regular_pay', sa.Float(), nullable=True),
        sa.Column('overtime_pay', sa.Float(), nullable=True),
        sa.Column('doubletime_pay', sa.Float(), nullable=True),
        sa.Column('commissions', sa.Float(), nullable=True),
        sa.Column('tips', sa.Float(), nullable=True),
        sa.Column('total_pay', sa.Float(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['event_payment_id'], ['event_payments.id'], ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_vendor_payment'),
    )
    op.create_index(
        'ix_event_vendor_payments_event_payment_id',
        'event_vendor_payments',
        ['event_payment_id'],
    )
    op.create_index('ix_event_vendor_payments_event_id', 'event_vendor_payments', ['event_id'])
    op.create_index('ix_event_vendor_payments_user_id', 'event_vendor_payments', ['user_id'])

    op.create_table(
        'payment_adjustments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('adjustment_amount', sa.Float(), nullable=True),
        sa.Column('adjustment_note', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_payment_adjustment'),
    )
    op.create_index('ix_payment_adjustments_event_id', 'payment_adjustments', ['event_id'])
    op.create_index('ix_payment_adjustments_user_id', 'payment_adjustments', ['user_id'])

    op.create_table(
        'state_rates',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('state_code', sa.String(length=2), nullable=True),
        sa.Column('state_name', sa.String(length=100), nullable=False),
        sa.Column('base_rate', sa.Float(), nullable=True),
        sa.Column('overtime_rate', sa.Float(), nullable=True),
        sa.Column('doubletime_rate', sa.Float(), nullable=True),
        sa.Column('tax_rate', sa.Float(), nullable=True),
        sa.Column('effective_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_state_rates_state_code', 'state_rates', ['state_code'], unique=True)

    op.create_table(
        'sick_leaves',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('duration_hours', sa.Float(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pending', 'approved', 'denied', name='leave_status'),
            nullable=True,
        ),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.Uuid(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sick_leaves_user_id', 'sick_leaves', ['user_id'])
    op.create_index('ix_sick_leaves_start_date', 'sick_leaves', ['start_date'])
    op.create_index('ix_sick_leaves_status', 'sick_leaves', ['status'])


def downgrade() -> None:
    """Downgrade schema - Drop all staffing tables and enums."""
    for table in (
        'sick_leaves',
        'state_rates',
        'payment_adjustments',
        'event_vendor_payments',
        'event_payments',
        'login_locations',
        'geofence_zones',
        'time_entries',
        'checkin_logs',
        'checkin_codes',
        'manager_team_members',
        'venue_reference',
        'regions',
        'vendor_invitations',
        'event_teams',
        'events',
        'background_checks',
        'i9_documents',
        'audit_logs',
        'profiles',
        'users',
    ):
        op.drop_table(table)

    for enum_name in (
        'leave_status',
        'geofence_zone_type_enum',
        'time_entry_action_enum',
        'invitation_status_enum',
        'invitation_type_enum',
        'team_member_status_enum',
        'background_check_status_enum',
        'onboarding_status_enum',
        'division_enum',
        'user_role_enum',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
