"""
Users Module
============

Bounded context for user management.

Responsibilities:
- Store user documents in the ``users`` collection
- Expose create, read, update and delete endpoints under /api/users
"""
