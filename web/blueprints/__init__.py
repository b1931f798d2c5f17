"""
Field Journal Web Blueprints Package.

This package contains Flask Blueprints for modular route organization.
"""

from web.blueprints.api import api_bp

__all__ = ["api_bp"]
