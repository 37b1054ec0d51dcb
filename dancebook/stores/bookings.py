# dancebook/stores/bookings.py

import logging

from sqlalchemy import exists, func, insert, literal, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from dancebook.errors import ClassFull, DuplicateBooking, NotFound, StoreFailure
from dancebook.models import Booking, DanceClass, STATUS_CANCELLED, STATUS_CONFIRMED, _new_id, utcnow
from .base import BaseStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('status', 'notes')


class BookingLedger(BaseStore):
    """
    Authoritative record of bookings.

    Duplicate prevention relies on the (user_id, class_id) unique constraint, so two
    concurrent inserts for the same pair can never both commit. When a capacity is
    passed to create(), the seat count check and the insert run as one statement.
    """

    def create(self, user_id, class_id, notes='', capacity=None):
        now = utcnow()
        values = {
            'id': _new_id(),
            'user_id': user_id,
            'class_id': class_id,
            'status': STATUS_CONFIRMED,
            'notes': notes or '',
            'created_at': now,
            'updated_at': now,
        }

        try:
            if capacity is None:
                result = self.session.execute(insert(Booking).values(**values))
            else:
                # Row lock on the class for backends that support SELECT ... FOR UPDATE
                self.session.execute(
                    select(DanceClass.id).where(DanceClass.id == class_id).with_for_update()
                )
                confirmed = (
                    select(func.count(Booking.id))
                    .where(Booking.class_id == class_id, Booking.status == STATUS_CONFIRMED)
                    .correlate(None)
                    .scalar_subquery()
                )
                # An existing record for the pair lets the row through so the unique
                # constraint reports the duplicate instead of a full class
                already_booked = (
                    exists()
                    .where(Booking.user_id == user_id, Booking.class_id == class_id)
                    .correlate(None)
                )
                row = select(*[
                    literal(value, type_=Booking.__table__.c[key].type) for key, value in values.items()
                ]).where(or_(confirmed < capacity, already_booked))
                result = self.session.execute(insert(Booking).from_select(list(values), row))
        except IntegrityError:
            self.session.rollback()
            logger.info(f"Duplicate booking rejected by constraint: user {user_id}, class {class_id}")
            raise DuplicateBooking()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Booking insert failed: {type(e).__name__}: {e}")
            raise StoreFailure() from e

        if result.rowcount == 0:
            self.session.rollback()
            logger.info(f"Class {class_id} full at capacity {capacity}, booking for user {user_id} rejected")
            raise ClassFull()

        self._commit()
        logger.info(f"Booking {values['id']} confirmed: user {user_id}, class {class_id}")
        return self.find_by_id(values['id'])

    def find_by_id(self, booking_id):
        if not booking_id:
            return None
        with self._reading():
            return self.session.get(Booking, booking_id)

    def find_all(self):
        with self._reading():
            return list(self.session.execute(
                select(Booking).order_by(Booking.created_at.desc())
            ).scalars())

    def find_by_user(self, user_id):
        with self._reading():
            return list(self.session.execute(
                select(Booking).filter_by(user_id=user_id).order_by(Booking.created_at.desc())
            ).scalars())

    def find_by_class(self, class_id):
        with self._reading():
            return list(self.session.execute(
                select(Booking).filter_by(class_id=class_id).order_by(Booking.created_at)
            ).scalars())

    def has_user_booked(self, user_id, class_id):
        with self._reading():
            found = self.session.execute(
                select(Booking.id).filter_by(user_id=user_id, class_id=class_id).limit(1)
            ).first()
        return found is not None

    def get_booking_count(self, class_id):
        with self._reading():
            return self.session.execute(
                select(func.count(Booking.id)).filter_by(class_id=class_id, status=STATUS_CONFIRMED)
            ).scalar_one()

    def update(self, booking_id, **fields):
        booking = self.find_by_id(booking_id)
        if booking is None:
            raise NotFound('Booking not found')
        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS:
                raise TypeError(f"Cannot update booking field: {key}")
            setattr(booking, key, value)
        booking.updated_at = utcnow()
        self._commit()
        return booking

    def cancel(self, booking_id):
        booking = self.update(booking_id, status=STATUS_CANCELLED)
        logger.info(f"Booking {booking_id} cancelled")
        return booking

    def delete(self, booking_id):
        booking = self.find_by_id(booking_id)
        if booking is None:
            return False
        self.session.delete(booking)
        self._commit()
        logger.info(f"Deleted booking {booking_id}")
        return True
