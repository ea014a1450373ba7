"""
Flask application factory module.

This module creates and configures the Flask application using
the factory pattern, allowing for different configurations
(development, testing, production).

The factory also wires the task service together: repositories,
the query cache and the notifier are built once per application
and exposed through ``app.extensions["task_service"]``.
"""

import logging
import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event

from config import get_config

# Initialize SQLAlchemy without binding to app
db = SQLAlchemy()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    """Replace SQLite's ASCII-only lower() with Python's Unicode-aware one."""
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     If None, uses FLASK_ENV environment variable.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    logger.info(f"Creating app with config: {config_class.__name__}")

    # Ensure instance folder exists
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        pass

    # Initialize extensions
    db.init_app(app)

    from taskboard.cache import QueryCache
    from taskboard.events import LoggingNotifier
    from taskboard.repository import CategoryRepository, TaskRepository
    from taskboard.services import TaskService

    app.extensions["task_service"] = TaskService(
        tasks=TaskRepository(),
        categories=CategoryRepository(),
        cache=QueryCache(
            default_ttl=app.config["TASK_CACHE_TTL"],
            max_entries=app.config["TASK_CACHE_MAX_ENTRIES"],
        ),
        notifier=LoggingNotifier(),
        cache_ttl=app.config["TASK_CACHE_TTL"],
    )

    # Register blueprints
    from taskboard.routes.api import api_bp, register_error_handlers

    app.register_blueprint(api_bp, url_prefix="/api/v1")
    register_error_handlers(app)

    # Create database tables
    with app.app_context():
        if db.engine.dialect.name == "sqlite":
            event.listen(db.engine, "connect", _register_sqlite_functions)
        db.create_all()
        logger.info("Database tables created")

    return app
