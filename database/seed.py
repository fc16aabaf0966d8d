"""
Database seeding for SiteBook.
Creates the BuildPro demo organization when its admin user is missing.
"""

import logging
from datetime import date, timedelta

from werkzeug.security import generate_password_hash

from database.connection import get_db_session
from database.models import (
    Organization, User, Project, Task, Meeting, Notification
)
from services.helpers import default_avatar, utc_now_iso

logger = logging.getLogger(__name__)

DEMO_ORG_ID = 'org1'
DEMO_ORG_NAME = "BuildPro Constructions"
DEMO_ADMIN_EMAIL = "me@example.com"
DEMO_PASSWORD = "buildpro123"

DEMO_USERS = [
    # id, name, email, role, is_admin, is_super_admin
    ('u1', 'John Builder', 'john@buildpro.com', 'builder', True, False),
    ('u2', 'Mike Carpenter', 'mike@buildpro.com', 'worker', False, False),
    ('u3', 'Sarah Electrician', 'sarah@buildpro.com', 'worker', False, False),
    ('u4', 'Dave Plumber', 'dave@buildpro.com', 'worker', False, False),
    ('u_admin', 'Super Admin', DEMO_ADMIN_EMAIL, 'builder', True, True),
]


def _day(offset):
    return (date.today() + timedelta(days=offset)).isoformat()


def seed_demo_users(session):
    """Create the demo organization and its team."""
    session.add(Organization(
        id=DEMO_ORG_ID,
        name=DEMO_ORG_NAME,
        status='active',
        subscription_status='active',
    ))
    password_hash = generate_password_hash(DEMO_PASSWORD, method='pbkdf2:sha256')
    for user_id, name, email, role, is_admin, is_super_admin in DEMO_USERS:
        session.add(User(
            id=user_id,
            organization_id=DEMO_ORG_ID,
            name=name,
            email=email,
            role=role,
            company=DEMO_ORG_NAME,
            avatar=default_avatar(name),
            password_hash=password_hash,
            is_admin=is_admin,
            is_super_admin=is_super_admin,
        ))
    session.flush()


def seed_demo_projects(session):
    """Create three demo projects with a few tasks, meetings and a notification."""
    now = utc_now_iso()
    projects = [
        Project(id='p1', organization_id=DEMO_ORG_ID, name='Modern Villa Renovation',
                address='123 Ocean Drive, Sydney', client_name='Mr. Smith',
                client_email='smith@example.com', client_phone='+61 400 123 456',
                status='active', progress=35, start_date=_day(0), end_date=_day(90),
                color='bg-gradient-to-br from-emerald-500 to-teal-600',
                created_by='u1', created_at=now),
        Project(id='p2', organization_id=DEMO_ORG_ID, name='City Apartment Complex',
                address='45 High St, Melbourne', client_name='Urban Corp',
                client_email='contact@urbancorp.com', client_phone='+61 3 9999 8888',
                status='active', progress=78, start_date=_day(-60), end_date=_day(30),
                color='bg-gradient-to-br from-blue-500 to-indigo-600',
                created_by='u1', created_at=now),
        Project(id='p3', organization_id=DEMO_ORG_ID, name='Downtown Office Fitout',
                address='88 Market St, Sydney', client_name='TechFlow Inc',
                client_email='admin@techflow.com', client_phone='+61 2 9999 7777',
                status='completed', progress=100, start_date=_day(-120), end_date=_day(-30),
                color='bg-slate-700', created_by='u1', created_at=now),
    ]
    session.add_all(projects)
    session.flush()

    session.add_all([
        Task(id='t1', project_id='p1', organization_id=DEMO_ORG_ID,
             title='Install Kitchen Frames',
             description='Setup the main frames for the kitchen area',
             status='pending', required_date=_day(1), assigned_to='u2', created_by='u1'),
        Task(id='t2', project_id='p1', organization_id=DEMO_ORG_ID,
             title='Electrical Wiring', description='Rough-in for living room',
             status='in-progress', required_date=_day(0), assigned_to='u3', created_by='u1'),
        Task(id='t3', project_id='p2', organization_id=DEMO_ORG_ID,
             title='Final Plumbing Check', description='Inspect all bathrooms',
             status='completed', required_date=_day(-1), assigned_to='u4',
             completed_at=_day(-1), completion_note='All sealed and tested.',
             completed_by='u4', created_by='u1'),
        Meeting(id='m1', organization_id=DEMO_ORG_ID, title='Site Inspection',
                date=_day(0), time='09:00', project_id='p1', attendees='["u1", "u2"]'),
        Meeting(id='m2', organization_id=DEMO_ORG_ID, title='Client Briefing',
                date=_day(1), time='14:00', project_id='p2', attendees='["u1"]'),
        Notification(id='n1', organization_id=DEMO_ORG_ID, user_id='u1',
                     message='Dave Plumber completed "Final Plumbing Check"',
                     is_read=False, date=_day(-1), notification_type='task_completed',
                     data={'taskId': 't3', 'projectId': 'p2'}),
    ])
    session.flush()


def seed_demo_data(session):
    """
    Seed the demo tenant inside an open session.

    Returns:
        True when data was created, False when the demo admin already exists
    """
    if session.query(User).filter_by(email=DEMO_ADMIN_EMAIL).first():
        logger.info("Demo data already present")
        return False

    seed_demo_users(session)
    seed_demo_projects(session)
    logger.info(f"Seeded demo organization: {DEMO_ORG_NAME}")
    return True


def seed_database():
    """
    Seed the database with demo data if absent.
    Call this at application startup.
    """
    try:
        with get_db_session() as session:
            return seed_demo_data(session)
    except Exception as e:
        logger.error(f"Database seeding failed: {e}")
        raise
