"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-03-02

Creates the tenant, team, project and scheduling tables for SiteBook.
Invoices ship without attachment_url; see 002.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _org_fk():
    return sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'])


def upgrade() -> None:
    # Organizations table
    op.create_table('organizations',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), default='active'),
        sa.Column('subscription_status', sa.String(20), default='trial'),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_organizations_name', 'organizations', ['name'])

    # Users table
    op.create_table('users',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), default='builder'),
        sa.Column('avatar', sa.Text()),
        sa.Column('phone', sa.String(50)),
        sa.Column('company', sa.String(255)),
        sa.Column('password_hash', sa.String(255)),
        sa.Column('is_admin', sa.Boolean(), default=False),
        sa.Column('is_super_admin', sa.Boolean(), default=False),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        _org_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_users_organization', 'users', ['organization_id'])

    # Projects table
    op.create_table('projects',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.Text()),
        sa.Column('client_name', sa.String(255)),
        sa.Column('client_email', sa.String(255)),
        sa.Column('client_phone', sa.String(50)),
        sa.Column('status', sa.String(20), default='active'),
        sa.Column('progress', sa.Integer(), default=0),
        sa.Column('start_date', sa.String(32)),
        sa.Column('end_date', sa.String(32)),
        sa.Column('color', sa.String(255)),
        sa.Column('created_by', sa.String(64)),
        sa.Column('created_at', sa.String(32)),
        _org_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_projects_organization', 'projects', ['organization_id'])

    # Tasks table
    op.create_table('tasks',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('project_id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('assigned_to', sa.String(64)),
        sa.Column('status', sa.String(20), default='pending'),
        sa.Column('required_date', sa.String(32)),
        sa.Column('completed_at', sa.String(32)),
        sa.Column('completion_note', sa.Text()),
        sa.Column('completion_image', sa.Text()),
        sa.Column('completion_images', sa.Text(), default='[]'),
        sa.Column('created_by', sa.String(64)),
        sa.Column('completed_by', sa.String(64)),
        sa.Column('attachments', sa.Text(), default='[]'),
        sa.Column('position', sa.Integer(), default=0),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        _org_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tasks_project', 'tasks', ['project_id'])
    op.create_index('ix_tasks_organization', 'tasks', ['organization_id'])

    # Task comments table
    op.create_table('task_comments',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('task_id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('images', sa.Text(), default='[]'),
        sa.Column('created_at', sa.String(32)),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id']),
        _org_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_task_comments_task', 'task_comments', ['task_id'])

    # Project updates table
    op.create_table('project_updates',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('project_id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('date', sa.String(32)),
        sa.Column('author_name', sa.String(255)),
        sa.Column('user_id', sa.String(64)),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        _org_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_project_updates_project', 'project_updates', ['project_id'])

    # Meetings table
    op.create_table('meetings',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('date', sa.String(32), nullable=False),
        sa.Column('time', sa.String(16)),
        sa.Column('project_id', sa.String(64)),
        sa.Column('attendees', sa.Text(), default='[]'),
        sa.Column('address', sa.Text()),
        sa.Column('description', sa.Text()),
        sa.Column('assigned_to', sa.String(64)),
        sa.Column('completed', sa.Boolean(), default=False),
        sa.Column('completed_by', sa.String(64)),
        sa.Column('completed_at', sa.String(32)),
        sa.Column('created_by', sa.String(64)),
        _org_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_meetings_organization', 'meetings', ['organization_id'])
    op.create_index('ix_meetings_project', 'meetings', ['project_id'])

    # Reminders table
    op.create_table('reminders',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('text', sa.Text()),
        sa.Column('description', sa.Text()),
        sa.Column('date', sa.String(32), nullable=False),
        sa.Column('completed', sa.Boolean(), default=False),
        sa.Column('assigned_to', sa.String(64)),
        sa.Column('completed_by', sa.String(64)),
        sa.Column('completed_at', sa.String(32)),
        sa.Column('created_by', sa.String(64)),
        _org_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reminders_organization', 'reminders', ['organization_id'])

    # Other matters table
    op.create_table('other_matters',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('address', sa.Text()),
        sa.Column('note', sa.Text()),
        sa.Column('date', sa.String(32)),
        sa.Column('assigned_to', sa.String(64)),
        sa.Column('created_by', sa.String(64)),
        _org_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_other_matters_organization', 'other_matters', ['organization_id'])

    # Invoices table
    op.create_table('invoices',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False, default=0),
        sa.Column('client_name', sa.String(255)),
        sa.Column('due_date', sa.String(32)),
        sa.Column('status', sa.String(20), default='pending'),
        sa.Column('date', sa.String(32)),
        sa.Column('description', sa.Text()),
        sa.Column('project_id', sa.String(64)),
        sa.Column('created_by', sa.String(64)),
        _org_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_invoices_organization', 'invoices', ['organization_id'])
    op.create_index('ix_invoices_project', 'invoices', ['project_id'])

    # Notifications table
    op.create_table('notifications',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('organization_id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), default=False),
        sa.Column('date', sa.String(32)),
        sa.Column('type', sa.String(30), default='task_completed'),
        sa.Column('data', sa.JSON()),
        _org_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_organization', 'notifications', ['organization_id'])
    op.create_index('ix_notifications_user', 'notifications', ['user_id'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('invoices')
    op.drop_table('other_matters')
    op.drop_table('reminders')
    op.drop_table('meetings')
    op.drop_table('project_updates')
    op.drop_table('task_comments')
    op.drop_table('tasks')
    op.drop_table('projects')
    op.drop_table('users')
    op.drop_table('organizations')
