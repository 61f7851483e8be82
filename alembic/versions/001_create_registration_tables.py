"""Create registration tables

Revision ID: 001_create_registration_tables
Revises:
Create Date: 2026-10-17

Companies, pre-registrations, groups with their memberships, the company-name
code directory and the website settings row. Identity and code uniqueness
live in partial unique indexes.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_create_registration_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create registration tables."""
    op.create_table(
        'groups',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('time_from', sa.String(5), nullable=False),
        sa.Column('time_to', sa.String(5), nullable=False),
        sa.Column('date', sa.String(20), nullable=False),
        sa.Column('day', sa.String(20), nullable=False, server_default=''),
        sa.Column('max_companies', sa.Integer(), nullable=False, server_default='0'),
        # NULL on legacy rows: counted from memberships
        sa.Column('registered_count', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('is_closed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'pre_registrations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('mobile_number', sa.String(50), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(4), nullable=False, server_default=''),
        sa.Column('group_id', sa.Uuid(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_pre_registrations_company_name', 'pre_registrations', ['company_name'])
    op.create_index('ix_pre_registrations_mobile_code', 'pre_registrations', ['mobile_number', 'code'])
    op.create_index(
        'uq_pre_registrations_identity', 'pre_registrations', ['company_name', 'code'],
        unique=True, postgresql_where=sa.text("code <> ''"),
    )
    op.create_index(
        'uq_pre_registrations_name_without_code', 'pre_registrations', ['company_name'],
        unique=True, postgresql_where=sa.text("code = ''"),
    )

    op.create_table(
        'companies',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(4), nullable=False, server_default=''),
        sa.Column('registrant_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('email', sa.String(255), nullable=False, server_default=''),
        sa.Column('phone_number', sa.String(50), nullable=False, server_default=''),
        sa.Column('address', sa.Text(), nullable=False, server_default=''),
        sa.Column('logo', sa.String(500), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('business_type', sa.String(100), nullable=False, server_default=''),
        sa.Column('registration_number', sa.String(100), nullable=False, server_default=''),
        sa.Column('tax_id', sa.String(50), nullable=False, server_default=''),
        sa.Column('website', sa.String(500), nullable=False, server_default=''),
        sa.Column('registration_fee', sa.Float(), nullable=False, server_default='0'),
        sa.Column('group_id', sa.Uuid(), sa.ForeignKey('groups.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('spent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('imported', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'pre_registration_id', sa.Uuid(),
            sa.ForeignKey('pre_registrations.id', ondelete='SET NULL'),
            nullable=True, unique=True,
        ),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_companies_name', 'companies', ['name'])
    op.create_index('ix_companies_group_id', 'companies', ['group_id'])
    op.create_index(
        'uq_companies_code', 'companies', ['code'],
        unique=True, postgresql_where=sa.text("code <> ''"),
    )
    op.create_index(
        'uq_companies_name_code', 'companies', ['name', 'code'],
        unique=True, postgresql_where=sa.text("code <> ''"),
    )
    op.create_index(
        'uq_companies_name_without_code', 'companies', ['name'],
        unique=True, postgresql_where=sa.text("code = ''"),
    )

    op.create_table(
        'group_memberships',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('group_id', sa.Uuid(), sa.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('admitted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('group_id', 'company_id', name='uq_group_membership'),
    )
    op.create_index('ix_group_memberships_group_id', 'group_memberships', ['group_id'])
    op.create_index('ix_group_memberships_company_id', 'group_memberships', ['company_id'])

    op.create_table(
        'company_names',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('code', sa.String(4), nullable=False, unique=True),
        sa.Column('contact_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('mobile_number', sa.String(50), nullable=False, server_default=''),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('length(code) = 4', name='ck_company_names_code_length'),
    )

    op.create_table(
        'website_settings',
        sa.Column('key', sa.String(50), primary_key=True),
        sa.Column('is_open', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('message', sa.Text(), nullable=False, server_default=''),
        sa.Column('open_time', sa.String(5), nullable=False, server_default=''),
        sa.Column('close_time', sa.String(5), nullable=False, server_default=''),
        sa.Column('auto_schedule', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('auto_closed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('codes_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('post_registration_message', sa.Text(), nullable=False, server_default=''),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_by', sa.String(255)),
    )


def downgrade():
    """Drop registration tables."""
    op.drop_table('website_settings')
    op.drop_table('company_names')
    op.drop_table('group_memberships')
    op.drop_table('companies')
    op.drop_table('pre_registrations')
    op.drop_table('groups')
