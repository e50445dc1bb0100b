"""
Users Service
=============

Minimal user-management HTTP service backed by MongoDB.
"""

__version__ = "1.0.0"
