"""
API module untuk PIN Gate API.
Berisi endpoints dan dependencies untuk API.
"""

from app.api.v1 import auth, health

__all__ = ["auth", "health"]
