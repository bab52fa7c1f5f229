"""
Konfigurasi aplikasi menggunakan Pydantic Settings.
Semua konfigurasi dimuat dari environment variables atau file .env.
"""

from typing import Optional, List, Tuple
from functools import lru_cache

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Konfigurasi aplikasi utama."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # Application Settings
    APP_NAME: str = Field(default="PIN Gate API", description="Nama service di log dan OpenAPI")
    APP_VERSION: str = Field(default="1.0.0", description="Versi yang dilaporkan health endpoint")
    DEBUG: bool = Field(default=False, description="Aktifkan docs, body logging, dan stack trace")
    ENVIRONMENT: str = Field(default="development", description="development, test, atau production")
    API_V1_STR: str = Field(default="/api/v1", description="Prefix semua route")

    # Lockout Policy
    LOCKOUT_INCREMENT: int = Field(default=5, description="Panjang satu siklus percobaan PIN")
    LOCKOUT_THRESHOLDS: List[Tuple[int, int]] = Field(
        default=[(5, 30), (10, 120), (15, 600)],
        description="Pasangan (jumlah percobaan gagal, durasi lockout dalam detik)"
    )
    AUTO_LOCK_MINUTES: int = Field(default=5, description="Auto-lock aplikasi setelah tidak aktif (menit)")

    # PIN Policy
    PIN_MIN_LENGTH: int = Field(default=6, description="Panjang minimal PIN")
    PIN_MAX_LENGTH: int = Field(default=12, description="Panjang maksimal PIN")
    PIN_HASH: Optional[str] = Field(None, description="Argon2 hash dari PIN yang tersimpan")

    # State Store
    STATE_BACKEND: str = Field(default="redis", description="Backend untuk attempt/lockout state (redis|memory)")
    STATE_KEY_PREFIX: str = Field(default="pingate", description="Prefix untuk Redis keys")
    STATE_LOCK_TIMEOUT_SECONDS: float = Field(default=30.0, description="Masa berlaku lock state store")
    STATE_LOCK_BLOCKING_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Lama menunggu lock state store sebelum gagal"
    )

    # Redis
    REDIS_URL: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    REDIS_POOL_SIZE: int = Field(default=10, description="Max koneksi di Redis pool")

    # Database (audit trail)
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./pingate.db",
        description="SQLAlchemy async database URL"
    )
    DB_POOL_SIZE: int = Field(default=5, description="Pool size audit database (non-SQLite)")
    DB_MAX_OVERFLOW: int = Field(default=0, description="Koneksi tambahan di atas pool size")
    DB_POOL_PRE_PING: bool = Field(default=True, description="Cek koneksi sebelum dipakai ulang")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Level logging root logger")
    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Format logging.basicConfig"
    )

    @field_validator("STATE_BACKEND", mode='before')
    def validate_state_backend(cls, v: str) -> str:
        """Validate state backend name."""
        v = str(v).strip().lower()
        if v not in ("redis", "memory"):
            raise ValueError("STATE_BACKEND must be 'redis' or 'memory'")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    def validate_log_level(cls, v: str) -> str:
        v = str(v).strip().upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return v

    @field_validator("PIN_MAX_LENGTH")
    def validate_pin_length(cls, v: int, info: ValidationInfo) -> int:
        """PIN_MAX_LENGTH tidak boleh lebih kecil dari PIN_MIN_LENGTH."""
        min_length = info.data.get("PIN_MIN_LENGTH", 1)
        if v < min_length:
            raise ValueError("PIN_MAX_LENGTH must be >= PIN_MIN_LENGTH")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Settings dibaca sekali per proses."""
    return Settings()


settings = get_settings()
