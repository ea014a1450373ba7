"""WSGI entry point for the task board API."""

import os

from taskboard import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
