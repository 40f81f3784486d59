"""
Services Package

Business logic layer for the application.
"""

from .auth_service import AuthService
from .thumbnail_service import ThumbnailService
from .wizard_service import WizardService

__all__ = ['AuthService', 'ThumbnailService', 'WizardService']
