# dancebook/courses/routes.py

from flask import Blueprint, jsonify, render_template

from dancebook.errors import NotFound
from dancebook.identity import current_identity
from dancebook.utils import get_services

courses_bp = Blueprint('courses', __name__, url_prefix='/courses')

UPCOMING_PAGE_LIMIT = 20


@courses_bp.route('')
def list_courses():
    courses = get_services().catalog.find_all_courses()
    return render_template('courses/list.html', courses=courses)


@courses_bp.route('/<course_id>')
def course_detail(course_id):
    catalog = get_services().catalog
    course = catalog.find_course(course_id)
    if course is None:
        raise NotFound('Course not found')

    classes = [catalog.format_for_display(c) for c in catalog.find_classes_by_course(course_id)]
    return render_template('courses/detail.html', course=course, classes=classes)


@courses_bp.route('/upcoming/classes')
def upcoming_classes():
    catalog = get_services().catalog
    classes = []
    for dance_class in catalog.find_upcoming(UPCOMING_PAGE_LIMIT):
        formatted = catalog.format_for_display(dance_class)
        formatted['course'] = catalog.find_course(dance_class.course_id)
        classes.append(formatted)
    return render_template('classes/upcoming.html', classes=classes)


@courses_bp.route('/class/<class_id>')
def class_detail(class_id):
    services = get_services()
    dance_class = services.catalog.find_class(class_id)
    if dance_class is None:
        raise NotFound('Class not found')

    course = services.catalog.find_course(dance_class.course_id)
    if course is None:
        raise NotFound('The course associated with this class does not exist')

    identity = current_identity()
    user_has_booked = bool(identity) and services.ledger.has_user_booked(identity.user_id, class_id)

    booking_count = services.ledger.get_booking_count(class_id)
    return render_template(
        'classes/detail.html',
        dance_class=services.catalog.format_for_display(dance_class),
        course=course,
        user_has_booked=user_has_booked,
        booking_count=booking_count,
        spots_available=max(0, dance_class.capacity - booking_count),
    )


# --- JSON API ---

def _class_json(dance_class):
    data = dance_class.to_dict()
    data['date'] = dance_class.date.isoformat()
    return data


@courses_bp.route('/api/all')
def api_courses():
    courses = get_services().catalog.find_all_courses()
    return jsonify({'success': True, 'courses': [c.to_dict() for c in courses]})


@courses_bp.route('/api/<course_id>')
def api_course(course_id):
    course = get_services().catalog.find_course(course_id)
    if course is None:
        raise NotFound('Course not found')
    return jsonify({'success': True, 'course': course.to_dict()})


@courses_bp.route('/api/<course_id>/classes')
def api_course_classes(course_id):
    catalog = get_services().catalog
    if catalog.find_course(course_id) is None:
        raise NotFound('Course not found')
    classes = catalog.find_classes_by_course(course_id)
    return jsonify({'success': True, 'classes': [_class_json(c) for c in classes]})
