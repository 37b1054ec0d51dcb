# dancebook/auth/routes.py

import logging
from urllib.parse import urlparse

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from dancebook.errors import DuplicateEmail
from dancebook.identity import clear_auth_cookie, current_identity, set_auth_cookie
from dancebook.utils import get_services
from .forms import LoginForm, RegistrationForm

logger = logging.getLogger(__name__)

# Define the Blueprint
auth_bp = Blueprint('auth', __name__)


def _safe_redirect_target(target):
    # Only same-site relative paths are followed after login
    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc or not target.startswith('/'):
        return None
    return target


@auth_bp.route('/')
def index():
    services = get_services()
    limit = current_app.config['UPCOMING_CLASSES_LIMIT']
    upcoming = [services.catalog.format_for_display(c) for c in services.catalog.find_upcoming(limit)]
    return render_template('index.html', upcoming_classes=upcoming)


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    if current_identity() is not None:
        return redirect(url_for('bookings.dashboard'))

    form = RegistrationForm()
    if form.validate_on_submit():
        try:
            user = get_services().users.create(form.name.data, form.email.data, form.password.data)
        except DuplicateEmail as e:
            form.email.errors.append(e.message)
            return render_template('auth/register.html', form=form), 400

        logger.info(f"New registration: {user.id}")
        flash("Registration successful! Welcome to the studio.", "success")
        return set_auth_cookie(redirect(url_for('bookings.dashboard')), user)

    status = 400 if request.method == 'POST' else 200
    return render_template('auth/register.html', form=form), status


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if current_identity() is not None:
        return redirect(url_for('bookings.dashboard'))

    form = LoginForm()
    if request.method == 'GET':
        form.redirect.data = request.args.get('redirect', '')

    if form.validate_on_submit():
        user = get_services().users.verify_password(form.email.data, form.password.data)
        if user is None:
            logger.info("Failed login attempt")
            return render_template('auth/login.html', form=form, error="Invalid email or password"), 401

        target = _safe_redirect_target(form.redirect.data) or url_for('bookings.dashboard')
        return set_auth_cookie(redirect(target), user)

    status = 400 if request.method == 'POST' else 200
    return render_template('auth/login.html', form=form), status


@auth_bp.route('/logout')
def logout():
    return clear_auth_cookie(redirect(url_for('auth.index')))
