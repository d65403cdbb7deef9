"""
Core Components.

Structure:
    models/: Pure data structures (no business logic)

Business logic lives in services/, storage adapters in infrastructure/.
"""

from . import models

__all__ = ['models']
