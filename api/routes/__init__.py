"""
API Routes Package

Contains all FastAPI route handlers.
"""

from . import auth
from . import generation
from . import styles
from . import thumbnails
from . import wizard

__all__ = ['auth', 'generation', 'styles', 'thumbnails', 'wizard']
