"""create_jobs_profiles_and_notifications

Revision ID: 20261019_0000
Revises:
Create Date: 2026-10-19 00:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa

from jobmatch.database_types import GUID, JSONDict, StringList


revision = '20261019_0000'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('external_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('company', sa.String(), nullable=False),
        sa.Column('location', sa.String(), nullable=False),
        sa.Column('job_type', sa.String(), nullable=True),
        sa.Column('experience_level', sa.String(), nullable=True),
        sa.Column('priority', sa.String(), nullable=True),
        sa.Column('industry', sa.String(), nullable=True),
        sa.Column('department', sa.String(), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('salary_min', sa.Float(), nullable=True),
        sa.Column('salary_max', sa.Float(), nullable=True),
        sa.Column('salary_range', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('requirements', sa.Text(), nullable=True),
        sa.Column('skills_required', StringList(), nullable=False),
        sa.Column('remote_friendly', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(), nullable=False, server_default='Active'),
        sa.Column('posted_date', sa.Date(), nullable=True),
        sa.Column('expires_date', sa.Date(), nullable=True),
        sa.Column('last_sync_date', sa.DateTime(), nullable=True),
        sa.Column('sync_status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('data_source', sa.String(), nullable=False, server_default='airtable'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_jobs_external_id'), 'jobs', ['external_id'], unique=True)
    op.create_index(op.f('ix_jobs_status'), 'jobs', ['status'], unique=False)
    op.create_index(op.f('ix_jobs_posted_date'), 'jobs', ['posted_date'], unique=False)
    op.create_index(op.f('ix_jobs_sync_status'), 'jobs', ['sync_status'], unique=False)

    op.create_table(
        'profiles',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('job_title', sa.String(length=255), nullable=True),
        sa.Column('experience_level', sa.String(length=50), nullable=True),
        sa.Column('experience_years', sa.Integer(), nullable=True),
        sa.Column('skills', StringList(), nullable=False),
        sa.Column('preferred_job_types', StringList(), nullable=False),
        sa.Column('preferred_locations', StringList(), nullable=False),
        sa.Column('preferred_salary_min', sa.Float(), nullable=True),
        sa.Column('preferred_salary_max', sa.Float(), nullable=True),
        sa.Column('remote_preference', sa.String(length=50), nullable=True),
        sa.Column('email_notifications_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_profiles_email'), 'profiles', ['email'], unique=True)

    op.create_table(
        'notifications',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('profile_id', GUID(), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('metadata', JSONDict(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], name='fk_notifications_profile_id'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notifications_profile_id'), 'notifications', ['profile_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_notifications_profile_id'), table_name='notifications')
    op.drop_table('notifications')

    op.drop_index(op.f('ix_profiles_email'), table_name='profiles')
    op.drop_table('profiles')

    op.drop_index(op.f('ix_jobs_sync_status'), table_name='jobs')
    op.drop_index(op.f('ix_jobs_posted_date'), table_name='jobs')
    op.drop_index(op.f('ix_jobs_status'), table_name='jobs')
    op.drop_index(op.f('ix_jobs_external_id'), table_name='jobs')
    op.drop_table('jobs')
