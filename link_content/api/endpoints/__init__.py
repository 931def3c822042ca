"""
API endpoints for the link content workflow.

This module contains all the REST API endpoints for the system.
"""

from .batch import batch_bp
from .health import health_bp

__all__ = [
    'batch_bp',
    'health_bp'
]
