"""
Client package for the Task Board API.

- api: blocking HTTP client over requests
- store: asyncio state store that keeps the task list in sync with filters
- forms: task creation form with client-side validation
"""
