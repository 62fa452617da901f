"""
Middleware package for the PropertyHub API.
"""

from .validation import ValidationMiddleware

__all__ = ["ValidationMiddleware"]
