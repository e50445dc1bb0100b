"""
Infrastructure
==============

Process-level infrastructure: the MongoDB connector and the HTTP server.
"""
