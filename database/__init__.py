"""
Database Package

SQLite schema and async connection management.
"""
