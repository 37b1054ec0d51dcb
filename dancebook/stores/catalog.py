# dancebook/stores/catalog.py

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from dancebook.errors import NotFound, ValidationFailed
from dancebook.models import Course, DanceClass, LEVELS
from .base import BaseStore

logger = logging.getLogger(__name__)

COURSE_FIELDS = ('title', 'description', 'level', 'image_url')
CLASS_FIELDS = ('course_id', 'title', 'description', 'date', 'start_time', 'end_time',
                'capacity', 'instructor', 'location')
DEFAULT_CAPACITY = 20


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, '%Y-%m-%d').date()


class CatalogStore(BaseStore):
    """Courses and the classes scheduled under them."""

    # --- Courses ---

    def create_course(self, title, description='', level='beginner', image_url=None):
        if level not in LEVELS:
            raise ValidationFailed({'level': f"Level must be one of: {', '.join(LEVELS)}"})
        course = Course(title=title, description=description or '', level=level, image_url=image_url or None)
        self.session.add(course)
        self._commit_course(course.title)
        logger.info(f"Created course {course.id} ({course.title})")
        return course

    def find_course(self, course_id):
        if not course_id:
            return None
        with self._reading():
            return self.session.get(Course, course_id)

    def find_all_courses(self):
        with self._reading():
            return list(self.session.execute(select(Course).order_by(Course.title)).scalars())

    def update_course(self, course_id, **fields):
        course = self.find_course(course_id)
        if course is None:
            raise NotFound('Course not found')
        if 'level' in fields and fields['level'] not in LEVELS:
            raise ValidationFailed({'level': f"Level must be one of: {', '.join(LEVELS)}"})
        for key, value in fields.items():
            if key not in COURSE_FIELDS:
                raise TypeError(f"Cannot update course field: {key}")
            setattr(course, key, value)
        self._commit_course(course.title)
        return course

    def delete_course(self, course_id):
        course = self.find_course(course_id)
        if course is None:
            return False
        if self.find_classes_by_course(course_id):
            raise ValidationFailed(
                {'course': 'Delete or move the classes of this course first'},
                message='This course still has scheduled classes',
            )
        self.session.delete(course)
        self._commit()
        logger.info(f"Deleted course {course_id}")
        return True

    def _commit_course(self, title):
        try:
            self._commit()
        except IntegrityError:
            raise ValidationFailed({'title': f"A course titled '{title}' already exists"})

    # --- Classes ---

    def create_class(self, course_id, title, date, start_time, end_time, instructor, location,
                     description='', capacity=None):
        if self.find_course(course_id) is None:
            raise ValidationFailed({'course_id': 'Course not found'})
        dance_class = DanceClass(
            course_id=course_id,
            title=title,
            description=description or '',
            date=_as_date(date),
            start_time=start_time,
            end_time=end_time,
            capacity=DEFAULT_CAPACITY if capacity is None else capacity,
            instructor=instructor,
            location=location,
        )
        if dance_class.capacity <= 0:
            raise ValidationFailed({'capacity': 'Capacity must be a positive number'})
        self.session.add(dance_class)
        self._commit()
        logger.info(f"Created class {dance_class.id} ({dance_class.title} on {dance_class.date})")
        return dance_class

    def find_class(self, class_id):
        if not class_id:
            return None
        with self._reading():
            return self.session.get(DanceClass, class_id)

    def find_all_classes(self):
        with self._reading():
            return list(self.session.execute(
                select(DanceClass).order_by(DanceClass.date, DanceClass.start_time)
            ).scalars())

    def find_classes_by_course(self, course_id):
        with self._reading():
            return list(self.session.execute(
                select(DanceClass)
                .filter_by(course_id=course_id)
                .order_by(DanceClass.date, DanceClass.start_time)
            ).scalars())

    def find_upcoming(self, limit=10):
        today = date.today()
        with self._reading():
            return list(self.session.execute(
                select(DanceClass)
                .where(DanceClass.date >= today)
                .order_by(DanceClass.date, DanceClass.start_time)
                .limit(limit)
            ).scalars())

    def update_class(self, class_id, **fields):
        dance_class = self.find_class(class_id)
        if dance_class is None:
            raise NotFound('Class not found')
        unknown = set(fields) - set(CLASS_FIELDS)
        if unknown:
            raise TypeError(f"Cannot update class fields: {', '.join(sorted(unknown))}")
        if 'course_id' in fields and self.find_course(fields['course_id']) is None:
            raise ValidationFailed({'course_id': 'Course not found'})
        if 'capacity' in fields and (fields['capacity'] is None or fields['capacity'] <= 0):
            raise ValidationFailed({'capacity': 'Capacity must be a positive number'})
        for key, value in fields.items():
            if key == 'date':
                value = _as_date(value)
            setattr(dance_class, key, value)
        self._commit()
        return dance_class

    def delete_class(self, class_id):
        dance_class = self.find_class(class_id)
        if dance_class is None:
            return False
        self.session.delete(dance_class)
        self._commit()
        logger.info(f"Deleted class {class_id}")
        return True

    def has_capacity(self, class_id, current_confirmed_count):
        dance_class = self.find_class(class_id)
        if dance_class is None:
            raise NotFound('Class not found')
        return current_confirmed_count < dance_class.capacity

    @staticmethod
    def format_for_display(dance_class):
        """
        Returns the class fields plus human-readable date and time strings.
        The stored record is left untouched.
        """
        formatted = dance_class.to_dict()
        class_date = dance_class.date
        if class_date:
            formatted['date_formatted'] = f"{class_date:%A, %B} {class_date.day}, {class_date:%Y}"
        if dance_class.start_time and dance_class.end_time:
            formatted['time_range'] = f"{dance_class.start_time} - {dance_class.end_time}"
        return formatted
