# app.py - Credit Tracker Flask application
import atexit
import logging
import os

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from flask import Flask
import pytz

load_dotenv()

from config import Config
from models import db
from routes import api_bp, auth_bp, main_bp
from services import purge_expired_sessions, purge_sessions_job

logger = logging.getLogger(__name__)


def create_app(config_object=Config, **overrides):
    """Flask application factory"""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.config.update(overrides)

    if not app.config.get('SECRET_KEY'):
        raise RuntimeError("FLASK_SECRET_KEY environment variable must be set for security")

    # Initialize database with app
    db.init_app(app)

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)

    # --- Flask CLI commands ---
    @app.cli.command("init-db")
    def init_db_command():
        """Creates the database tables."""
        with app.app_context():
            db.create_all()
        print("Database initialized.")

    @app.cli.command("purge-sessions")
    def purge_sessions_command():
        """Deletes expired login sessions."""
        with app.app_context():
            removed = purge_expired_sessions()
        print(f"Removed {removed} expired session(s).")

    return app


def start_scheduler(app):
    """Run the expired-session purge in the background"""
    scheduler = BackgroundScheduler(timezone=pytz.timezone(app.config['SCHEDULER_TIMEZONE']))
    scheduler.add_job(
        lambda: purge_sessions_job(app),
        'interval',
        minutes=app.config['SESSION_PURGE_MINUTES'],
        id='session_purge_job',
    )
    scheduler.start()
    # Shut the scheduler down with the process
    atexit.register(lambda: scheduler.shutdown())
    return scheduler


def main():
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    app = create_app()

    with app.app_context():
        try:
            logger.info("Checking database tables...")
            db.create_all()
            logger.info("Database ready.")
        except Exception as e:
            logger.critical(f"Error during DB initialization: {e}")
            logger.critical("Please check your .env file and ensure the database server is running.")
            raise

    try:
        start_scheduler(app)
        logger.info("Scheduler started")
    except Exception as e:
        logger.error(f"Error starting scheduler: {e}")

    port = int(os.environ.get("PORT", Config.PORT))
    app.run(host=Config.HOST, port=port, debug=Config.DEBUG, use_reloader=False)


if __name__ == '__main__':
    main()
