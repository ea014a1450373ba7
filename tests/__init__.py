"""
Test suite for the Task Board application.

This package contains:
- unit/: query composition, cache, service and client store tests
- integration/: REST API tests through the Flask test client
"""
