"""
Database models module initialization.
Exports the Tortoise ORM models used by the user record store.
"""
from .user import User
