"""
Utility modules shared by the backend apps.
"""

from .errors import error_response, validation_error

__all__ = ['error_response', 'validation_error']
