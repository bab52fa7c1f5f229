"""
Services module untuk PIN Gate API.
Berisi business logic layer yang terpisah dari presentation dan data layers.
"""

from app.services.auth import AuthService
from app.services.audit import AuditService
from app.services.biometry import BiometricEnrollmentGuard
from app.services.lockout_policy import LockoutPolicy, ThresholdRule, PenaltyDecision
from app.services.lockout_state import LockoutStateMachine
from app.services.state_store import StateStore, InMemoryStateStore, RedisStateStore
from app.services.verifier import CredentialVerifier, LocalCredentialVerifier

__all__ = [
    "AuthService",
    "AuditService",
    "BiometricEnrollmentGuard",
    "LockoutPolicy",
    "ThresholdRule",
    "PenaltyDecision",
    "LockoutStateMachine",
    "StateStore",
    "InMemoryStateStore",
    "RedisStateStore",
    "CredentialVerifier",
    "LocalCredentialVerifier"
]
