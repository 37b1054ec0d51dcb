# dancebook/bookings/routes.py

import logging

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for

from dancebook.errors import ValidationFailed
from dancebook.identity import admin_required, current_identity, login_required
from dancebook.models import ROLE_ADMIN
from dancebook.utils import get_services

logger = logging.getLogger(__name__)

bookings_bp = Blueprint('bookings', __name__)
bookings_api_bp = Blueprint('bookings_api', __name__, url_prefix='/api/bookings')


def _requested_class_id():
    class_id = request.form.get('classId')
    if not class_id and request.is_json:
        class_id = (request.get_json(silent=True) or {}).get('classId')
    if not class_id:
        raise ValidationFailed({'classId': 'A class must be selected'})
    return class_id


@bookings_bp.route('/bookings', methods=['POST'])
@login_required
def create_booking():
    identity = current_identity()
    class_id = _requested_class_id()

    booking = get_services().workflow.request_booking(identity.user_id, class_id)
    logger.info(f"User {identity.user_id} booked class {class_id} ({booking.id})")
    flash("Your place is booked!", "success")
    return redirect(url_for('bookings.dashboard'))


@bookings_bp.route('/bookings/cancel/<booking_id>')
@login_required
def cancel_booking(booking_id):
    identity = current_identity()
    get_services().workflow.request_cancellation(booking_id, identity.user_id, identity.role)
    flash("Your booking has been cancelled.", "info")
    return redirect(url_for('bookings.dashboard'))


@bookings_bp.route('/dashboard')
@login_required
def dashboard():
    identity = current_identity()
    if identity.role == ROLE_ADMIN:
        return redirect(url_for('admin.admin_dashboard'))

    services = get_services()
    bookings = services.workflow.bookings_with_details(identity.user_id)
    booked_class_ids = {item['booking'].class_id for item in bookings}

    limit = current_app.config['UPCOMING_CLASSES_LIMIT']
    upcoming = [
        services.catalog.format_for_display(c)
        for c in services.catalog.find_upcoming(limit)
    ]
    return render_template('dashboard.html', bookings=bookings, upcoming_classes=upcoming,
                           booked_class_ids=booked_class_ids)


@bookings_api_bp.route('/class/<class_id>')
@admin_required
def class_bookings(class_id):
    bookings = get_services().ledger.find_by_class(class_id)
    return jsonify({'success': True, 'bookings': [b.to_dict() for b in bookings]})
