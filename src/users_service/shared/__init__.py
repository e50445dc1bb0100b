"""
Shared Kernel Module
====================

Generic infrastructure used by the users module: logging, HTTP middleware
and the application context.

DO NOT add user-management business logic to the shared kernel.
"""
