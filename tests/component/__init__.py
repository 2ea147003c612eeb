"""
Component tests for the storefront backend

Component tests exercise the FastAPI routes, the identity layer and the
database functions together against a real (SQLite) database.
"""
