# dancebook/admin/routes.py

import logging
from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for

from dancebook.errors import NotFound, ValidationFailed
from dancebook.identity import admin_required, current_identity
from dancebook.models import STATUS_CONFIRMED
from dancebook.utils import get_services
from .forms import ClassForm, CourseForm

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


@admin_bp.before_request
@admin_required
def check_admin_access():
    # Every admin route needs a valid token with the admin role
    return None


def _add_form_errors(form, error):
    for field_name, message in error.errors.items():
        field = getattr(form, field_name, None)
        if field is None:
            form.form_errors.append(message)
        else:
            field.errors.append(message)


@admin_bp.route('')
def admin_dashboard():
    services = get_services()
    bookings = services.ledger.find_all()

    limit = current_app.config['UPCOMING_CLASSES_LIMIT']
    upcoming = []
    for dance_class in services.catalog.find_upcoming(limit):
        formatted = services.catalog.format_for_display(dance_class)
        formatted['course'] = services.catalog.find_course(dance_class.course_id)
        formatted['booking_count'] = services.ledger.get_booking_count(dance_class.id)
        upcoming.append(formatted)

    known_users = {user.id for user in services.users.find_all()}
    active_users = {
        b.user_id for b in bookings
        if b.status == STATUS_CONFIRMED and b.user_id in known_users
    }

    stats = {
        'courses_count': len(services.catalog.find_all_courses()),
        'classes_count': len(services.catalog.find_all_classes()),
        'users_count': services.users.count(),
        'active_users': len(active_users),
        'bookings_count': len(bookings),
    }
    return render_template('admin/dashboard.html', stats=stats, upcoming_classes=upcoming)


# --- Courses ---

@admin_bp.route('/courses')
def manage_courses():
    courses = get_services().catalog.find_all_courses()
    return render_template('admin/courses.html', courses=courses)


@admin_bp.route('/courses/new', methods=['GET', 'POST'])
@admin_bp.route('/courses/<course_id>/edit', methods=['GET', 'POST'])
def course_form(course_id=None):
    catalog = get_services().catalog
    course = None
    if course_id:
        course = catalog.find_course(course_id)
        if course is None:
            raise NotFound('The course you are trying to edit does not exist')

    form = CourseForm(obj=course)
    if form.validate_on_submit():
        fields = {
            'title': form.title.data.strip(),
            'description': form.description.data,
            'level': form.level.data,
            'image_url': form.image_url.data or None,
        }
        try:
            if course:
                catalog.update_course(course.id, **fields)
                flash('Course updated successfully!', 'success')
            else:
                catalog.create_course(**fields)
                flash('Course created successfully!', 'success')
        except ValidationFailed as e:
            _add_form_errors(form, e)
            return render_template('admin/course_form.html', form=form, course=course), 400
        return redirect(url_for('admin.manage_courses'))

    status = 400 if request.method == 'POST' else 200
    return render_template('admin/course_form.html', form=form, course=course), status


@admin_bp.route('/courses/<course_id>/delete', methods=['POST'])
def delete_course(course_id):
    if not get_services().catalog.delete_course(course_id):
        raise NotFound('Course not found')
    return jsonify({'success': True, 'message': 'Course deleted successfully'})


# --- Classes ---

@admin_bp.route('/classes')
def manage_classes():
    services = get_services()
    course_id = request.args.get('courseId')
    course = None
    if course_id:
        course = services.catalog.find_course(course_id)
        classes = services.catalog.find_classes_by_course(course_id)
    else:
        classes = services.catalog.find_all_classes()

    rows = []
    for dance_class in classes:
        formatted = services.catalog.format_for_display(dance_class)
        formatted['course'] = course or services.catalog.find_course(dance_class.course_id)
        formatted['booking_count'] = services.ledger.get_booking_count(dance_class.id)
        rows.append(formatted)

    return render_template('admin/classes.html', classes=rows, courses=services.catalog.find_all_courses(),
                           selected_course=course)


@admin_bp.route('/classes/new', methods=['GET', 'POST'])
@admin_bp.route('/classes/<class_id>/edit', methods=['GET', 'POST'])
def class_form(class_id=None):
    catalog = get_services().catalog
    dance_class = None
    if class_id:
        dance_class = catalog.find_class(class_id)
        if dance_class is None:
            raise NotFound('The class you are trying to edit does not exist')

    form = ClassForm(obj=dance_class)
    form.course_id.choices = [(c.id, c.title) for c in catalog.find_all_courses()]
    if request.method == 'GET' and dance_class is None and request.args.get('courseId'):
        if catalog.find_course(request.args['courseId']) is None:
            raise NotFound('The course you are trying to add a class to does not exist')
        form.course_id.data = request.args['courseId']

    if form.validate_on_submit():
        fields = {
            'course_id': form.course_id.data,
            'title': form.title.data.strip(),
            'description': form.description.data or '',
            'date': form.date.data,
            'start_time': form.start_time.data,
            'end_time': form.end_time.data,
            'capacity': form.capacity.data or current_app.config['DEFAULT_CLASS_CAPACITY'],
            'instructor': form.instructor.data,
            'location': form.location.data,
        }
        try:
            if dance_class:
                catalog.update_class(dance_class.id, **fields)
                flash('Class updated successfully!', 'success')
            else:
                catalog.create_class(**fields)
                flash('Class created successfully!', 'success')
        except ValidationFailed as e:
            _add_form_errors(form, e)
            return render_template('admin/class_form.html', form=form, dance_class=dance_class), 400
        return redirect(url_for('admin.manage_classes', courseId=fields['course_id']))

    status = 400 if request.method == 'POST' else 200
    return render_template('admin/class_form.html', form=form, dance_class=dance_class), status


@admin_bp.route('/classes/<class_id>/delete', methods=['POST'])
def delete_class(class_id):
    if not get_services().catalog.delete_class(class_id):
        raise NotFound('Class not found')
    return jsonify({'success': True, 'message': 'Class deleted successfully'})


@admin_bp.route('/classes/<class_id>/participants')
def class_participants(class_id):
    services = get_services()
    dance_class = services.catalog.find_class(class_id)
    if dance_class is None:
        raise NotFound('The class you are looking for does not exist')

    participants = services.workflow.participants(class_id)
    return render_template(
        'admin/participants.html',
        dance_class=services.catalog.format_for_display(dance_class),
        course=services.catalog.find_course(dance_class.course_id),
        participants=participants,
        booking_count=services.ledger.get_booking_count(class_id),
        capacity=dance_class.capacity,
    )


# --- Users ---

@admin_bp.route('/users')
def manage_users():
    services = get_services()
    users = [
        {'user': user, 'bookings_count': len(services.ledger.find_by_user(user.id))}
        for user in services.users.find_all()
    ]
    return render_template('admin/users.html', users=users)


@admin_bp.route('/users/<user_id>')
def view_user(user_id):
    services = get_services()
    user = services.users.find_by_id(user_id)
    if user is None:
        raise NotFound('The user you are looking for does not exist')
    bookings = services.workflow.bookings_with_details(user_id)
    return render_template('admin/user_detail.html', user=user, bookings=bookings)


@admin_bp.route('/users/<user_id>/toggle-admin', methods=['POST'])
def toggle_admin(user_id):
    new_role = get_services().users.toggle_admin(user_id)
    label = 'an admin' if new_role == 'admin' else 'a regular user'
    return jsonify({'success': True, 'message': f'User is now {label}', 'role': new_role})


@admin_bp.route('/users/<user_id>/delete', methods=['POST'])
def delete_user(user_id):
    if user_id == current_identity().user_id:
        raise ValidationFailed({'user': 'You cannot delete your own account'},
                               message='You cannot delete your own account')
    if not get_services().users.delete(user_id):
        raise NotFound('User not found')
    return jsonify({'success': True, 'message': 'User deleted successfully'})
