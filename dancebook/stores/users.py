# dancebook/stores/users.py

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash

from dancebook.errors import DuplicateEmail, NotFound
from dancebook.models import User, ROLE_ADMIN, ROLE_USER, ROLES
from .base import BaseStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('name', 'email', 'password', 'role')


def normalize_email(email):
    return (email or '').strip().lower()


class CredentialStore(BaseStore):
    """Persists user records and checks passwords against their salted hashes."""

    def create(self, name, email, password, as_admin=False):
        user = User(
            name=name.strip(),
            email=normalize_email(email),
            password_hash=generate_password_hash(password),
            role=ROLE_ADMIN if as_admin else ROLE_USER,
        )
        self.session.add(user)
        try:
            self._commit()
        except IntegrityError:
            logger.info(f"Registration rejected, email already in use: {user.email}")
            raise DuplicateEmail()
        logger.info(f"Created {user.role} account {user.id}")
        return user

    def find_by_email(self, email):
        with self._reading():
            return self.session.execute(
                select(User).filter_by(email=normalize_email(email))
            ).scalar_one_or_none()

    def find_by_id(self, user_id):
        if not user_id:
            return None
        with self._reading():
            return self.session.get(User, user_id)

    def verify_password(self, email, password):
        user = self.find_by_email(email)
        if user is None or not password:
            return None
        if not check_password_hash(user.password_hash, password):
            return None
        return user

    def update(self, user_id, **fields):
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFound('User not found')

        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise TypeError(f"Cannot update user fields: {', '.join(sorted(unknown))}")

        if fields.get('name') is not None:
            user.name = fields['name'].strip()
        if fields.get('email') is not None:
            user.email = normalize_email(fields['email'])
        if fields.get('password'):
            user.password_hash = generate_password_hash(fields['password'])
        if fields.get('role') is not None:
            if fields['role'] not in ROLES:
                raise ValueError(f"Unknown role: {fields['role']}")
            user.role = fields['role']

        try:
            self._commit()
        except IntegrityError:
            raise DuplicateEmail()
        return user

    def toggle_admin(self, user_id):
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFound('User not found')
        new_role = ROLE_USER if user.role == ROLE_ADMIN else ROLE_ADMIN
        self.update(user_id, role=new_role)
        logger.info(f"User {user_id} is now {new_role}")
        return new_role

    def delete(self, user_id):
        user = self.find_by_id(user_id)
        if user is None:
            return False
        self.session.delete(user)
        self._commit()
        logger.info(f"Deleted user {user_id}")
        return True

    def find_all(self):
        with self._reading():
            return list(self.session.execute(select(User).order_by(User.name)).scalars())

    def count(self):
        with self._reading():
            return self.session.query(User).count()
