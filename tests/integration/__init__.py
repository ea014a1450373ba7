"""
API test package for the Task Board.

Tests use the Flask test client and cover:
- Listing, filtering and pagination
- Creation and deletion through the service layer
- Input validation and error responses
"""
