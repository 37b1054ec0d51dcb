# dancebook/models.py

import uuid
from datetime import datetime, timezone

from database import db
from flask_login import UserMixin


ROLE_USER = 'user'
ROLE_ADMIN = 'admin'
ROLES = (ROLE_USER, ROLE_ADMIN)

LEVELS = ('beginner', 'intermediate', 'advanced')

STATUS_CONFIRMED = 'confirmed'
STATUS_CANCELLED = 'cancelled'


def _new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class User(TimestampMixin, db.Model, UserMixin):
    __tablename__ = 'users'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    name = db.Column(db.String(128), nullable=False)
    # Stored lower-cased, so the unique index is case-insensitive in effect
    email = db.Column(db.String(120), index=True, unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), default=ROLE_USER, nullable=False)

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def __repr__(self):
        return f'<User {self.email}>'


class Course(TimestampMixin, db.Model):
    __tablename__ = 'courses'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    title = db.Column(db.String(128), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    level = db.Column(db.String(20), nullable=False, default='beginner')  # beginner, intermediate, advanced
    image_url = db.Column(db.String(255), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'level': self.level,
            'image_url': self.image_url,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def __repr__(self):
        return f'<Course {self.title}>'


class DanceClass(TimestampMixin, db.Model):
    __tablename__ = 'classes'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    course_id = db.Column(db.String(36), index=True, nullable=False)
    title = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    date = db.Column(db.Date, index=True, nullable=False)
    start_time = db.Column(db.String(5), nullable=False)  # HH:MM, local time
    end_time = db.Column(db.String(5), nullable=False)
    capacity = db.Column(db.Integer, nullable=False, default=20)
    instructor = db.Column(db.String(128), nullable=False)
    location = db.Column(db.String(128), nullable=False)

    __table_args__ = (
        db.CheckConstraint('capacity > 0', name='ck_class_capacity_positive'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'course_id': self.course_id,
            'title': self.title,
            'description': self.description,
            'date': self.date,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'capacity': self.capacity,
            'instructor': self.instructor,
            'location': self.location,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    def __repr__(self):
        return f'<DanceClass {self.title} {self.date}>'


class Booking(TimestampMixin, db.Model):
    __tablename__ = 'bookings'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    user_id = db.Column(db.String(36), index=True, nullable=False)
    class_id = db.Column(db.String(36), index=True, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_CONFIRMED)  # confirmed, cancelled
    notes = db.Column(db.Text, nullable=False, default='')

    __table_args__ = (
        # One record per (user, class) regardless of status
        db.UniqueConstraint('user_id', 'class_id', name='uq_booking_user_class'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'class_id': self.class_id,
            'status': self.status,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Booking {self.user_id} -> {self.class_id} ({self.status})>'
