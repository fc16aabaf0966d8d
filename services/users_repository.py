"""
Users Repository - Database access layer for team members and signup.
"""

import logging
from typing import List, Optional, Dict

from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash, check_password_hash

from database.models import Organization, User
from services.errors import NotFoundError
from services.helpers import default_avatar, generate_id
from validators import ValidationError, ensure_valid, validate_signup_request

logger = logging.getLogger(__name__)


class UsersRepository:
    """Repository for user database operations."""

    def __init__(self, session: Session, organization_id: str = None):
        self.session = session
        self.organization_id = organization_id

    def list_users(self) -> List[Dict]:
        """List users of the organization."""
        query = self.session.query(User)
        if self.organization_id:
            query = query.filter(User.organization_id == self.organization_id)
        users = query.order_by(User.name).all()
        return [u.to_dict() for u in users]

    def get_user(self, user_id: str) -> Optional[Dict]:
        """Get a user by ID."""
        user = self.session.query(User).filter(User.id == user_id).first()
        return user.to_dict() if user else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (returns model). Emails are unique system-wide."""
        if not email:
            return None
        return self.session.query(User).filter(User.email == email.strip()).first()

    def find_organization_id_by_name(self, name: str) -> Optional[str]:
        """Id of the oldest organization with exactly this name."""
        organization = self.session.query(Organization).filter(
            Organization.name == name.strip()
        ).order_by(Organization.created_at, Organization.id).first()
        return organization.id if organization else None

    def signup(self, data: Dict) -> Dict:
        """
        Register a user.

        With an organizationId the user joins that organization. With
        joinByName the user joins the organization already named after the
        company, when there is one. Otherwise a new organization named after
        the company is created and the user becomes its admin; a joining user
        is never admin.

        Returns:
            {'userId': ..., 'orgId': ...}
        """
        ensure_valid(validate_signup_request(data))
        if self.get_user_by_email(data['email']):
            raise ValidationError(f"Email '{data['email']}' is already registered", field='email')

        org_id = data.get('organizationId')
        company = data.get('company')
        is_admin = False
        if not org_id and company and data.get('joinByName'):
            org_id = self.find_organization_id_by_name(company)
        if org_id:
            if self.session.get(Organization, org_id) is None:
                raise NotFoundError('Organization', org_id)
        else:
            if not company:
                raise ValidationError("company is required to create an organization", field='company')
            organization = Organization(id=generate_id(), name=company.strip(), status='active',
                                        subscription_status='trial')
            self.session.add(organization)
            self.session.flush()
            org_id = organization.id
            is_admin = True
            logger.info(f"Created organization {org_id} ({company})")

        password = data.get('password')
        user = User(
            id=data.get('id') or generate_id(),
            organization_id=org_id,
            name=data['name'],
            email=data['email'].strip(),
            role=data.get('role') or 'builder',
            avatar=data.get('avatar') or default_avatar(data['name']),
            phone=data.get('phone'),
            company=data.get('company'),
            password_hash=generate_password_hash(password, method='pbkdf2:sha256') if password else None,
            is_admin=is_admin,
            is_super_admin=False,
        )
        self.session.add(user)
        self.session.flush()
        logger.info(f"Created user: {user.id} in organization {org_id}")
        return {'userId': user.id, 'orgId': org_id}

    def update_user(self, data: Dict) -> Dict:
        """Full replace of a user's profile by id."""
        query = self.session.query(User).filter(User.id == data.get('id'))
        if self.organization_id:
            query = query.filter(User.organization_id == self.organization_id)
        user = query.first()
        if not user:
            raise NotFoundError('User', data.get('id'))

        email = data.get('email')
        if email and email != user.email:
            ensure_valid(validate_signup_request({'name': data.get('name') or user.name, 'email': email}))
            if self.get_user_by_email(email):
                raise ValidationError(f"Email '{email}' is already registered", field='email')

        # Super admin is granted out of band, never through a profile update
        user.apply_wire({k: v for k, v in data.items() if k != 'isSuperAdmin'})
        if data.get('password'):
            user.password_hash = generate_password_hash(data['password'], method='pbkdf2:sha256')

        self.session.flush()
        logger.info(f"Updated user: {user.id}")
        return user.to_dict()

    def verify_password(self, user: User, password: str) -> bool:
        """Verify a user's password."""
        if not user.password_hash:
            return False
        return check_password_hash(user.password_hash, password)
