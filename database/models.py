"""
SQLAlchemy models for SiteBook.
Defines the per-organization tables behind the sync gateway.

Columns are snake_case; to_dict() produces the camelCase wire shape the
client store consumes. List-valued fields are JSON text and always decode
to a list through services.list_codec.
"""

from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, DateTime,
    ForeignKey, JSON, Index
)
from sqlalchemy.orm import relationship
from database.connection import Base
from services.helpers import generate_id
from services.list_codec import parse_list, serialize_list


def utcnow():
    """Timezone-aware UTC now for DateTime defaults."""
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class WireMixin:
    """Maps camelCase request fields onto model columns."""

    # camelCase wire field -> column attribute
    WIRE_FIELDS = {}
    # Column attributes holding JSON-encoded lists
    LIST_FIELDS = ()

    def apply_wire(self, data):
        """Copy every known wire field present in data onto the model."""
        for wire_name, attr in self.WIRE_FIELDS.items():
            if wire_name not in data:
                continue
            value = data[wire_name]
            if attr in self.LIST_FIELDS:
                value = serialize_list(value)
            setattr(self, attr, value)
        return self


# =============================================================================
# ORGANIZATION (tenant)
# =============================================================================

class Organization(Base, WireMixin):
    """Organization/Company - the tenant isolation boundary."""
    __tablename__ = 'organizations'

    WIRE_FIELDS = {
        'name': 'name',
        'status': 'status',
        'subscriptionStatus': 'subscription_status',
    }

    id = Column(String(64), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    status = Column(String(20), default='active')  # active, suspended
    subscription_status = Column(String(20), default='trial')  # active, trial, past_due, cancelled
    created_at = Column(DateTime(timezone=True), default=utcnow)

    users = relationship("User", back_populates="organization")

    __table_args__ = (
        Index('ix_organizations_name', 'name'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'createdAt': _iso(self.created_at),
            'status': self.status or 'active',
            'subscriptionStatus': self.subscription_status or 'trial',
        }


# =============================================================================
# USERS
# =============================================================================

class User(Base, WireMixin):
    """Team members. Email is unique across all organizations."""
    __tablename__ = 'users'

    WIRE_FIELDS = {
        'name': 'name',
        'email': 'email',
        'role': 'role',
        'avatar': 'avatar',
        'phone': 'phone',
        'company': 'company',
        'isAdmin': 'is_admin',
        'isSuperAdmin': 'is_super_admin',
    }

    id = Column(String(64), primary_key=True, default=generate_id)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(String(50), default='builder')  # builder, worker, or an extended role
    avatar = Column(Text)
    phone = Column(String(50))
    company = Column(String(255))
    password_hash = Column(String(255))
    is_admin = Column(Boolean, default=False)
    is_super_admin = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    organization = relationship("Organization", back_populates="users")

    __table_args__ = (
        Index('ix_users_organization', 'organization_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'organizationId': self.organization_id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'avatar': self.avatar or '',
            'phone': self.phone,
            'company': self.company,
            'isAdmin': bool(self.is_admin),
            'isSuperAdmin': bool(self.is_super_admin),
        }


# =============================================================================
# PROJECTS
# =============================================================================

class Project(Base, WireMixin):
    """Construction projects. A project owns its tasks and timeline updates."""
    __tablename__ = 'projects'

    WIRE_FIELDS = {
        'name': 'name',
        'address': 'address',
        'clientName': 'client_name',
        'clientEmail': 'client_email',
        'clientPhone': 'client_phone',
        'status': 'status',
        'progress': 'progress',
        'startDate': 'start_date',
        'endDate': 'end_date',
        'color': 'color',
        'createdBy': 'created_by',
        'createdAt': 'created_at',
    }

    id = Column(String(64), primary_key=True, default=generate_id)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    name = Column(String(255), nullable=False)
    address = Column(Text)
    client_name = Column(String(255))
    client_email = Column(String(255))
    client_phone = Column(String(50))
    status = Column(String(20), default='active')  # active, completed, on-hold
    progress = Column(Integer, default=0)
    start_date = Column(String(32))
    end_date = Column(String(32))
    color = Column(String(255))
    created_by = Column(String(64))
    created_at = Column(String(32))

    tasks = relationship("Task", back_populates="project", order_by="Task.position")
    updates = relationship("ProjectUpdate", back_populates="project", order_by="ProjectUpdate.date")

    __table_args__ = (
        Index('ix_projects_organization', 'organization_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'organizationId': self.organization_id,
            'name': self.name,
            'address': self.address or '',
            'clientName': self.client_name or '',
            'clientEmail': self.client_email,
            'clientPhone': self.client_phone,
            'status': self.status or 'active',
            'progress': self.progress or 0,
            'startDate': self.start_date,
            'endDate': self.end_date,
            'color': self.color or '',
            'createdBy': self.created_by,
            'createdAt': self.created_at,
        }


class Task(Base, WireMixin):
    """Tasks within a project."""
    __tablename__ = 'tasks'

    WIRE_FIELDS = {
        'title': 'title',
        'description': 'description',
        'assignedTo': 'assigned_to',
        'status': 'status',
        'requiredDate': 'required_date',
        'completedAt': 'completed_at',
        'completionNote': 'completion_note',
        'completionImage': 'completion_image',
        'completionImages': 'completion_images',
        'createdBy': 'created_by',
        'completedBy': 'completed_by',
        'attachments': 'attachments',
    }
    LIST_FIELDS = ('completion_images', 'attachments')

    id = Column(String(64), primary_key=True, default=generate_id)
    project_id = Column(String(64), ForeignKey('projects.id'), nullable=False)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    assigned_to = Column(String(64))
    status = Column(String(20), default='pending')  # pending, in-progress, completed
    required_date = Column(String(32))
    completed_at = Column(String(32))
    completion_note = Column(Text)
    completion_image = Column(Text)
    completion_images = Column(Text, default='[]')
    created_by = Column(String(64))
    completed_by = Column(String(64))
    attachments = Column(Text, default='[]')
    position = Column(Integer, default=0)

    project = relationship("Project", back_populates="tasks")
    comments = relationship("TaskComment", back_populates="task", order_by="TaskComment.created_at")

    __table_args__ = (
        Index('ix_tasks_project', 'project_id'),
        Index('ix_tasks_organization', 'organization_id'),
    )

    def to_dict(self, include_comments=True):
        data = {
            'id': self.id,
            'projectId': self.project_id,
            'organizationId': self.organization_id,
            'title': self.title,
            'description': self.description or '',
            'assignedTo': self.assigned_to,
            'status': self.status or 'pending',
            'requiredDate': self.required_date,
            'completedAt': self.completed_at,
            'completionNote': self.completion_note,
            'completionImage': self.completion_image,
            'completionImages': parse_list(self.completion_images),
            'createdBy': self.created_by,
            'completedBy': self.completed_by,
            'attachments': parse_list(self.attachments),
        }
        if include_comments:
            data['comments'] = [c.to_dict() for c in self.comments]
        return data


class TaskComment(Base, WireMixin):
    """Comment thread entries on a task."""
    __tablename__ = 'task_comments'

    WIRE_FIELDS = {
        'userId': 'user_id',
        'message': 'message',
        'images': 'images',
        'createdAt': 'created_at',
    }
    LIST_FIELDS = ('images',)

    id = Column(String(64), primary_key=True, default=generate_id)
    task_id = Column(String(64), ForeignKey('tasks.id'), nullable=False)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    user_id = Column(String(64), nullable=False)
    message = Column(Text, nullable=False)
    images = Column(Text, default='[]')
    created_at = Column(String(32))

    task = relationship("Task", back_populates="comments")

    __table_args__ = (
        Index('ix_task_comments_task', 'task_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'taskId': self.task_id,
            'userId': self.user_id,
            'message': self.message,
            'images': parse_list(self.images),
            'createdAt': self.created_at,
        }


class ProjectUpdate(Base, WireMixin):
    """Project timeline entries, independent of task state."""
    __tablename__ = 'project_updates'

    WIRE_FIELDS = {
        'message': 'message',
        'date': 'date',
        'authorName': 'author_name',
        'userId': 'user_id',
    }

    id = Column(String(64), primary_key=True, default=generate_id)
    project_id = Column(String(64), ForeignKey('projects.id'), nullable=False)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    message = Column(Text, nullable=False)
    date = Column(String(32))
    author_name = Column(String(255))
    user_id = Column(String(64))

    project = relationship("Project", back_populates="updates")

    __table_args__ = (
        Index('ix_project_updates_project', 'project_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'projectId': self.project_id,
            'organizationId': self.organization_id,
            'message': self.message,
            'date': self.date,
            'authorName': self.author_name or '',
            'userId': self.user_id,
        }


# =============================================================================
# SCHEDULE
# =============================================================================

class Meeting(Base, WireMixin):
    """Site meetings and appointments."""
    __tablename__ = 'meetings'

    WIRE_FIELDS = {
        'title': 'title',
        'date': 'date',
        'time': 'time',
        'projectId': 'project_id',
        'attendees': 'attendees',
        'address': 'address',
        'description': 'description',
        'assignedTo': 'assigned_to',
        'completed': 'completed',
        'completedBy': 'completed_by',
        'completedAt': 'completed_at',
        'createdBy': 'created_by',
    }
    LIST_FIELDS = ('attendees',)

    id = Column(String(64), primary_key=True, default=generate_id)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    title = Column(String(255), nullable=False)
    date = Column(String(32), nullable=False)
    time = Column(String(16))
    project_id = Column(String(64))
    attendees = Column(Text, default='[]')
    address = Column(Text)
    description = Column(Text)
    assigned_to = Column(String(64))
    completed = Column(Boolean, default=False)
    completed_by = Column(String(64))
    completed_at = Column(String(32))
    created_by = Column(String(64))

    __table_args__ = (
        Index('ix_meetings_organization', 'organization_id'),
        Index('ix_meetings_project', 'project_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'organizationId': self.organization_id,
            'title': self.title,
            'date': self.date,
            'time': self.time or '',
            'projectId': self.project_id,
            'attendees': parse_list(self.attendees),
            'address': self.address,
            'description': self.description,
            'assignedTo': self.assigned_to,
            'completed': bool(self.completed),
            'completedBy': self.completed_by,
            'completedAt': self.completed_at,
            'createdBy': self.created_by,
        }


class Reminder(Base, WireMixin):
    """Dated reminders for the team."""
    __tablename__ = 'reminders'

    WIRE_FIELDS = {
        'title': 'title',
        'text': 'text',
        'description': 'description',
        'date': 'date',
        'completed': 'completed',
        'assignedTo': 'assigned_to',
        'completedBy': 'completed_by',
        'completedAt': 'completed_at',
        'createdBy': 'created_by',
    }

    id = Column(String(64), primary_key=True, default=generate_id)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    title = Column(String(255), nullable=False)
    text = Column(Text)
    description = Column(Text)
    date = Column(String(32), nullable=False)
    completed = Column(Boolean, default=False)
    assigned_to = Column(String(64))
    completed_by = Column(String(64))
    completed_at = Column(String(32))
    created_by = Column(String(64))

    __table_args__ = (
        Index('ix_reminders_organization', 'organization_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'organizationId': self.organization_id,
            'title': self.title,
            'text': self.text,
            'description': self.description,
            'date': self.date,
            'completed': bool(self.completed),
            'assignedTo': self.assigned_to,
            'completedBy': self.completed_by,
            'completedAt': self.completed_at,
            'createdBy': self.created_by,
        }


class OtherMatter(Base, WireMixin):
    """Free-form sticky notes."""
    __tablename__ = 'other_matters'

    WIRE_FIELDS = {
        'title': 'title',
        'description': 'description',
        'address': 'address',
        'note': 'note',
        'date': 'date',
        'assignedTo': 'assigned_to',
        'createdBy': 'created_by',
    }

    id = Column(String(64), primary_key=True, default=generate_id)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    address = Column(Text)
    note = Column(Text)
    date = Column(String(32))
    assigned_to = Column(String(64))
    created_by = Column(String(64))

    __table_args__ = (
        Index('ix_other_matters_organization', 'organization_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'organizationId': self.organization_id,
            'title': self.title,
            'description': self.description,
            'address': self.address or '',
            'note': self.note or '',
            'date': self.date,
            'assignedTo': self.assigned_to,
            'createdBy': self.created_by,
        }


# =============================================================================
# FINANCE
# =============================================================================

class Invoice(Base, WireMixin):
    """Invoices sent to clients (receivable) or received from contractors (payable)."""
    __tablename__ = 'invoices'

    WIRE_FIELDS = {
        'type': 'invoice_type',
        'amount': 'amount',
        'clientName': 'client_name',
        'dueDate': 'due_date',
        'status': 'status',
        'date': 'date',
        'description': 'description',
        'projectId': 'project_id',
        'attachmentUrl': 'attachment_url',
        'createdBy': 'created_by',
    }

    id = Column(String(64), primary_key=True, default=generate_id)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    invoice_type = Column('type', String(20), nullable=False)  # sent, received
    amount = Column(Float, nullable=False, default=0)
    client_name = Column(String(255))
    due_date = Column(String(32))
    status = Column(String(20), default='pending')  # pending, paid, overdue
    date = Column(String(32))
    description = Column(Text)
    project_id = Column(String(64))
    # Added after the first deployments; repaired at write time when absent
    attachment_url = Column(Text)
    created_by = Column(String(64))

    __table_args__ = (
        Index('ix_invoices_organization', 'organization_id'),
        Index('ix_invoices_project', 'project_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'organizationId': self.organization_id,
            'type': self.invoice_type,
            'amount': self.amount or 0,
            'clientName': self.client_name or '',
            'dueDate': self.due_date,
            'status': self.status or 'pending',
            'date': self.date,
            'description': self.description or '',
            'projectId': self.project_id,
            'attachmentUrl': self.attachment_url,
            'createdBy': self.created_by,
        }


# =============================================================================
# NOTIFICATIONS
# =============================================================================

class Notification(Base, WireMixin):
    """In-app notifications addressed to one user."""
    __tablename__ = 'notifications'

    WIRE_FIELDS = {
        'userId': 'user_id',
        'message': 'message',
        'read': 'is_read',
        'date': 'date',
        'type': 'notification_type',
        'data': 'data',
    }

    id = Column(String(64), primary_key=True, default=generate_id)
    organization_id = Column(String(64), ForeignKey('organizations.id'), nullable=False)
    user_id = Column(String(64), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False)
    date = Column(String(32))
    notification_type = Column('type', String(30), default='task_completed')  # task_completed, urgent
    data = Column(JSON)

    __table_args__ = (
        Index('ix_notifications_organization', 'organization_id'),
        Index('ix_notifications_user', 'user_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'organizationId': self.organization_id,
            'userId': self.user_id,
            'message': self.message,
            'read': bool(self.is_read),
            'date': self.date,
            'type': self.notification_type or 'task_completed',
            'data': self.data,
        }


# Deletion order for an organization-wide cascade, children first
TENANT_TABLES = (
    TaskComment,
    Task,
    ProjectUpdate,
    Invoice,
    Meeting,
    Project,
    Reminder,
    OtherMatter,
    Notification,
    User,
)
