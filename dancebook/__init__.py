# dancebook/__init__.py

import os
import logging
from flask import Flask
from flask_wtf.csrf import CSRFProtect
from config import Config
from database import init_db, close_db_session

# Set up logging for debugging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

csrf = CSRFProtect()


def create_app(config_object=None):
    try:
        logger.info("Starting Flask app creation...")

        template_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'templates'))
        static_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'static'))

        app = Flask(__name__, template_folder=template_dir, static_folder=static_dir)
        app.config.from_object(config_object or Config)
        logger.info("Flask app instance created successfully")

        init_db(app)
        app.teardown_appcontext(close_db_session)
        logger.info("Database initialized with Flask app")

        csrf.init_app(app)

        from dancebook.errors import register_error_handlers
        from dancebook.identity import init_identity
        from dancebook.utils import register_template_filters

        init_identity(app)
        register_error_handlers(app)
        register_template_filters(app)

        # Register Blueprints
        logger.info("Registering blueprints...")
        from dancebook.auth.routes import auth_bp
        from dancebook.courses.routes import courses_bp
        from dancebook.bookings.routes import bookings_bp, bookings_api_bp
        from dancebook.admin.routes import admin_bp

        app.register_blueprint(auth_bp)
        app.register_blueprint(courses_bp)
        app.register_blueprint(bookings_bp)
        app.register_blueprint(bookings_api_bp)
        app.register_blueprint(admin_bp)
        logger.info("All blueprints registered successfully")

        logger.info("Flask app creation completed successfully")
        return app

    except Exception as e:
        logger.error(f"Failed to create Flask app: {str(e)}")
        logger.error(f"Error type: {type(e).__name__}")
        raise
