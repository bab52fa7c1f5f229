"""
PIN Gate API - PIN dan biometric unlock dengan escalating lockout.

Package ini menyediakan:
- Verifikasi PIN dengan attempt counter
- Escalating lockout berdasarkan tabel threshold
- Biometric unlock dan reconciliation enrolled biometrics
- Audit trail setiap percobaan verifikasi

Built with FastAPI, SQLAlchemy, dan Redis.
"""

__version__ = "1.0.0"
__author__ = "PIN Gate Team"
__license__ = "MIT"

__all__ = [
    "__version__",
    "__author__",
    "__license__",
]
