"""
REST API endpoints for Task management.

All endpoints return JSON responses and follow REST conventions.

Endpoints (mounted under /api/v1):
    GET    /health            - Health check
    GET    /tasks             - List tasks (filtered, paginated)
    POST   /tasks             - Create a new task
    GET    /tasks/<id>        - Get a single task by ID
    DELETE /tasks/<id>        - Delete a task
    GET    /categories        - List categories with task counts
    GET    /categories/<id>   - Get a single category with its task count
"""

import logging
import os

from flask import Blueprint, Flask, Response, current_app, jsonify, request

from taskboard.exceptions import TaskBoardError, ValidationError
from taskboard.filters import TaskFilter
from taskboard.services import TaskService
from taskboard.validation import validate_task_data

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def get_task_service() -> TaskService:
    """Return the task service wired by the application factory."""
    return current_app.extensions["task_service"]


# -----------------------------------------------------------------------------
# API Endpoints
# -----------------------------------------------------------------------------

@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Health check endpoint for deployment verification."""
    return jsonify({
        "status": "healthy",
        "environment": os.getenv("ENVIRONMENT", "unknown"),
        "version": os.getenv("APP_VERSION", "unknown")
    }), 200


@api_bp.route("/tasks", methods=["GET"])
def get_tasks() -> tuple[Response, int]:
    """
    List tasks with optional filtering and pagination.

    Query Parameters:
        status: Filter by status (pending, in_progress, completed)
        category_id: Filter by category
        search: Case-insensitive text searched in title and description
        due: Due bucket (today, overdue, upcoming)
        page: 1-based page number

    Returns:
        JSON response with the page of tasks and pagination metadata.
    """
    filters = TaskFilter.from_mapping(request.args)
    logger.info(f"GET /api/v1/tasks - Fetching tasks {filters.to_dict()}")

    page = get_task_service().get_tasks(filters, per_page=current_app.config["TASKS_PER_PAGE"])
    logger.info(f"Found {page.total} tasks, returning page {page.current_page}/{page.last_page}")

    return jsonify(page.to_dict()), 200


@api_bp.route("/tasks", methods=["POST"])
def create_task() -> tuple[Response, int]:
    """
    Create a new task.

    Request Body (JSON):
        title: Task title (required, 3-255 characters)
        description: Task description (optional)
        status: Task status (optional, default: pending)
        due_date: Due date, ISO format, today or later (optional)
        category_id: Existing category ID (optional)

    Returns:
        JSON response with created task and 201 status code,
        or field errors and 422 if validation fails.
    """
    logger.info("POST /api/v1/tasks - Creating new task")

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be JSON"}), 400

    errors = validate_task_data(data)
    if errors:
        logger.warning(f"Validation failed: {errors}")
        raise ValidationError(errors)

    task = get_task_service().create_task(data)
    return jsonify(task.to_dict()), 201


@api_bp.route("/tasks/<int:task_id>", methods=["GET"])
def get_task(task_id: int) -> tuple[Response, int]:
    """Get a single task by ID, or 404 if not found."""
    logger.info(f"GET /api/v1/tasks/{task_id} - Fetching task")

    task = get_task_service().get_task(task_id)
    return jsonify(task.to_dict()), 200


@api_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
def delete_task(task_id: int) -> tuple[Response, int]:
    """Delete a task, or 404 if not found."""
    logger.info(f"DELETE /api/v1/tasks/{task_id} - Deleting task")

    get_task_service().delete_task(task_id)
    return jsonify({"message": "Task deleted successfully"}), 200


@api_bp.route("/categories", methods=["GET"])
def get_categories() -> tuple[Response, int]:
    """List all categories with the number of tasks in each."""
    logger.info("GET /api/v1/categories - Fetching categories")

    categories = get_task_service().list_categories()
    return jsonify({"data": categories}), 200


@api_bp.route("/categories/<int:category_id>", methods=["GET"])
def get_category(category_id: int) -> tuple[Response, int]:
    """Get a single category with its task count, or 404 if not found."""
    logger.info(f"GET /api/v1/categories/{category_id} - Fetching category")

    category = get_task_service().get_category(category_id)
    return jsonify(category), 200


# -----------------------------------------------------------------------------
# Error Handlers
# -----------------------------------------------------------------------------

def register_error_handlers(app: Flask) -> None:
    """Map domain and HTTP errors to JSON responses."""

    @app.errorhandler(TaskBoardError)
    def handle_task_board_error(error: TaskBoardError) -> tuple[Response, int]:
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error: Exception) -> tuple[Response, int]:
        """Handle 404 Not Found errors."""
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error: Exception) -> tuple[Response, int]:
        """Handle 405 Method Not Allowed errors."""
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error: Exception) -> tuple[Response, int]:
        """Handle 500 Internal Server errors."""
        original = getattr(error, "original_exception", None) or error
        logger.error(f"Internal server error: {original!r}")
        return jsonify({"error": "Internal server error"}), 500
