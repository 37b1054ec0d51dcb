# dancebook/workflow.py

import logging

from dancebook.errors import ClassFull, DuplicateBooking, Forbidden, NotFound
from dancebook.models import ROLE_ADMIN

logger = logging.getLogger(__name__)


class BookingWorkflow:
    """Answers "can this user book this class now?" and handles cancellations."""

    def __init__(self, catalog, ledger, users=None):
        self.catalog = catalog
        self.ledger = ledger
        self.users = users

    def request_booking(self, user_id, class_id):
        dance_class = self.catalog.find_class(class_id)
        if dance_class is None:
            raise NotFound('Class not found')

        if self.ledger.has_user_booked(user_id, class_id):
            raise DuplicateBooking()

        # Advisory check; the ledger repeats it atomically on insert
        booked = self.ledger.get_booking_count(class_id)
        if not self.catalog.has_capacity(class_id, booked):
            # The seat may have gone to a concurrent request for this same pair
            if self.ledger.has_user_booked(user_id, class_id):
                raise DuplicateBooking()
            raise ClassFull()

        return self.ledger.create(user_id, class_id, capacity=dance_class.capacity)

    def request_cancellation(self, booking_id, requesting_user_id, requesting_role):
        booking = self.ledger.find_by_id(booking_id)
        if booking is None:
            raise NotFound('Booking not found')

        if booking.user_id != requesting_user_id and requesting_role != ROLE_ADMIN:
            logger.warning(f"User {requesting_user_id} tried to cancel booking {booking_id} of user {booking.user_id}")
            raise Forbidden('You do not have permission to cancel this booking')

        return self.ledger.cancel(booking_id)

    def bookings_with_details(self, user_id):
        """User's bookings with their class and course, skipping any whose class or course is gone."""
        details = []
        for booking in self.ledger.find_by_user(user_id):
            dance_class = self.catalog.find_class(booking.class_id)
            course = self.catalog.find_course(dance_class.course_id) if dance_class else None
            if dance_class is None or course is None:
                continue
            details.append({
                'booking': booking,
                'class': self.catalog.format_for_display(dance_class),
                'course': course,
            })
        return details

    def participants(self, class_id):
        dance_class = self.catalog.find_class(class_id)
        if dance_class is None:
            raise NotFound('Class not found')
        roster = []
        for booking in self.ledger.find_by_class(class_id):
            user = self.users.find_by_id(booking.user_id) if self.users else None
            roster.append({'booking': booking, 'user': user})
        return roster
