"""
Templates Module
================
"""

from .index import HTML_TEMPLATE

__all__ = ["HTML_TEMPLATE"]
