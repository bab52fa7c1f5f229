"""
Konstanta yang digunakan di seluruh aplikasi PIN Gate API.
"""

from enum import Enum


class PenaltyKind(str, Enum):
    """Keputusan lockout policy untuk satu jumlah percobaan gagal."""
    NONE = "NONE"
    WARN_ONE_MORE_ATTEMPT = "WARN_ONE_MORE_ATTEMPT"
    LOCK = "LOCK"


class OutcomeKind(str, Enum):
    """Hasil satu kali verifikasi kredensial."""
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    LOCKED_OUT = "LOCKED_OUT"


class LockoutStatus(str, Enum):
    """State dari lockout state machine."""
    UNLOCKED = "UNLOCKED"
    PENDING_NOTIFICATION = "PENDING_NOTIFICATION"
    LOCKED = "LOCKED"


class VerificationMethod(str, Enum):
    """Metode verifikasi yang dicatat di audit trail."""
    PIN = "PIN"
    BIOMETRICS = "BIOMETRICS"


# Message keys, dilokalisasi oleh presentation layer
class MessageKey:
    """Key pesan untuk presentation layer."""
    INCORRECT_PIN_TRIES = "PINEnter.IncorrectPINTries"
    LAST_TRY_BEFORE_TIMEOUT = "PINEnter.LastTryBeforeTimeout"
    LOCKED_OUT = "PINEnter.LockedOut"
    BIOMETRICS_CHANGED = "PINEnter.BiometricsChanged"
    BIOMETRICS_ERROR = "PINEnter.BiometricsError"
    VERIFICATION_BACKEND_ERROR = "Error.Message1041"


# Cache Keys
class CacheKey:
    """Template untuk Redis keys."""
    AUTH_POLICY_STATE = "{prefix}:auth:policy_state"
    BIOMETRY_PREFERENCE = "{prefix}:auth:biometry"
    LOCK_SUFFIX = ":lock"
