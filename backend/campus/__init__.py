"""Application package for the campus management API.

This package exposes the model, repository, service and authorization
modules used by the FastAPI application in `campus.main`. Individual
modules contain the concrete implementations and documentation.
"""
