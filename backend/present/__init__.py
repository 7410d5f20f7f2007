"""PRESENT attendance backend - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'PRESENT Attendance',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from present.api.qr import qr_bp
    from present.api.attendance import attendance_bp
    from present.api.subjects import subjects_bp
    from present.api.coursework import coursework_bp

    # QR check-in
    app.register_blueprint(qr_bp, url_prefix='/api/attendance/qr')

    # Instructor attendance management
    app.register_blueprint(
        attendance_bp,
        url_prefix='/api/teacher/subjects/<int:subject_id>/attendance'
    )
    app.register_blueprint(subjects_bp, url_prefix='/api/teacher/subjects')

    # Folders, submissions and grading
    app.register_blueprint(
        coursework_bp,
        url_prefix='/api/teacher/subjects/<int:subject_id>'
    )

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from present.utils.errors import AppError
    from present.utils.helpers import handle_error, error_response
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(AppError)
    def app_error(error):
        return error_response(error.message, error.status_code)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error('Unhandled server error: %s', error)
        return error_response('Internal server error', 500)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE') or os.path.join('logs', 'app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('PRESENT attendance startup')

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models so metadata is complete
        from present.models import (
            User, UserRole, Profile,
            SchoolYear, Semester, GradeLevel, Section,
            Subject, SubjectStudent,
            AttendanceSession, AttendanceRecord, AttendanceStatus,
            SubjectFolder, SubjectSubmission, SubmissionFile, StudentSubmission
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with sample data."""
        from present.services.seed_service import SeedService

        try:
            summary = SeedService.seed_all()
        except Exception as e:
            db.session.rollback()
            raise click.ClickException(f'Error seeding database: {e}')

        click.echo('Database seeded successfully!')
        for key, value in summary.items():
            click.echo(f'  {key}: {value}')
