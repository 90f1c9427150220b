"""
Core business logic package.

Listing normalization, classification and the analytics engine.
"""

from .analytics_engine import analyze, generate_timeline

__all__ = ["analyze", "generate_timeline"]
