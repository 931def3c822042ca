"""
Middleware components for the link content workflow.

This module contains middleware for authentication, logging,
and error handling.
"""

from .auth import AuthMiddleware
from .logging import LoggingMiddleware
from .error_handler import ErrorHandler

__all__ = [
    'AuthMiddleware',
    'LoggingMiddleware',
    'ErrorHandler'
]
