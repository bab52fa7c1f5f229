"""
Modul keamanan terpusat untuk PIN Gate API.
Menangani PIN hashing dan perbandingan digest.
"""

import hmac

from passlib.context import CryptContext


# PIN hashing context dengan Argon2
pin_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__rounds=4,
    argon2__memory_cost=65536,
    argon2__parallelism=2,
    argon2__hash_len=32,
    argon2__salt_len=16
)


class Security:
    """Kelas untuk operasi keamanan."""

    @staticmethod
    def hash_pin(pin: str) -> str:
        """
        Hash PIN menggunakan Argon2.

        Args:
            pin: Plain text PIN

        Returns:
            Hashed PIN
        """
        return pin_context.hash(pin)

    @staticmethod
    def verify_pin(plain_pin: str, hashed_pin: str) -> bool:
        """
        Verifikasi PIN terhadap hash.

        Args:
            plain_pin: Plain text PIN
            hashed_pin: Hashed PIN

        Returns:
            True jika PIN cocok
        """
        return pin_context.verify(plain_pin, hashed_pin)

    @staticmethod
    def constant_time_compare(val1: str, val2: str) -> bool:
        """
        Constant time string comparison untuk mencegah timing attacks.

        Args:
            val1: First string
            val2: Second string

        Returns:
            True jika sama
        """
        return hmac.compare_digest(val1.encode(), val2.encode())


# Global security instance
security = Security()
