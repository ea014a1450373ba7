"""
Routes package for the Task Board application.

This package contains route blueprints:
- api: versioned REST API endpoints for tasks and categories
"""
