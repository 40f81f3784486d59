"""
API Package

FastAPI application, dependencies and routers.
"""
