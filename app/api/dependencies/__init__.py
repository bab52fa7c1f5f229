"""
API dependencies module.
Berisi reusable dependencies untuk FastAPI endpoints.
"""

from app.api.dependencies.auth import (
    AuthComponents,
    get_auth_components,
    get_auth_service,
    get_biometry_store,
    get_lockout_policy,
    get_pin_hash_loader,
    get_policy_store,
    get_threshold_rule
)
from app.api.dependencies.database import get_db, get_redis

__all__ = [
    "AuthComponents",
    "get_auth_components",
    "get_auth_service",
    "get_biometry_store",
    "get_lockout_policy",
    "get_pin_hash_loader",
    "get_policy_store",
    "get_threshold_rule",
    "get_db",
    "get_redis"
]
