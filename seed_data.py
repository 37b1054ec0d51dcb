#!/usr/bin/env python3
"""
Seed the database with an admin account and a few sample courses and classes.
- Default: adds what is missing, matching courses by title and users by email.
- --force: also recreates the sample classes for every seeded course.

Admin credentials come from ADMIN_EMAIL / ADMIN_PASSWORD (see .env).
"""

import os
import sys
import logging
from datetime import date, timedelta

from dotenv import load_dotenv

load_dotenv()

from dancebook import create_app  # noqa: E402
from dancebook.errors import DuplicateEmail  # noqa: E402
from dancebook.utils import build_services  # noqa: E402
from database import db  # noqa: E402

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

COURSES = [
    ("Ballet Foundations", "Posture, positions and barre work for new dancers.", "beginner"),
    ("Contemporary Flow", "Floor work, release technique and improvisation.", "intermediate"),
    ("Salsa Social", "Partner work and shines for confident dancers.", "advanced"),
]

# (days from today, start, end, capacity)
CLASS_SLOTS = [
    (1, "18:00", "19:30", 12),
    (8, "18:00", "19:30", 12),
]


def seed(force=False):
    services = build_services(db.session)

    admin_email = os.environ.get('ADMIN_EMAIL', 'admin@example.com')
    admin_password = os.environ.get('ADMIN_PASSWORD')
    if not admin_password:
        logger.warning("ADMIN_PASSWORD not set, skipping admin account")
    else:
        try:
            services.users.create('Studio Admin', admin_email, admin_password, as_admin=True)
            logger.info(f"Created admin account {admin_email}")
        except DuplicateEmail:
            logger.info(f"Admin account {admin_email} already exists")

    existing = {course.title: course for course in services.catalog.find_all_courses()}
    for title, description, level in COURSES:
        course = existing.get(title)
        if course is None:
            course = services.catalog.create_course(title, description, level)
            logger.info(f"Seeded course: {title}")
        elif not force:
            continue
        else:
            for dance_class in services.catalog.find_classes_by_course(course.id):
                services.catalog.delete_class(dance_class.id)

        for days, start, end, capacity in CLASS_SLOTS:
            class_date = date.today() + timedelta(days=days)
            services.catalog.create_class(
                course_id=course.id,
                title=f"{title} ({class_date:%d %b})",
                date=class_date,
                start_time=start,
                end_time=end,
                capacity=capacity,
                instructor="Studio Instructor",
                location="Main Studio",
            )
            logger.info(f"Seeded class: {title} on {class_date} {start}-{end}")


if __name__ == '__main__':
    app = create_app()
    with app.app_context():
        seed(force="--force" in sys.argv)
