"""
Models module untuk PIN Gate API.
Berisi SQLAlchemy models untuk database.
"""

from app.models.verification_attempt import VerificationAttempt

__all__ = [
    "VerificationAttempt"
]
