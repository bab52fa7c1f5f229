#!/usr/bin/env python
"""
Script untuk membuat Argon2 hash dari PIN untuk setting PIN_HASH.
Usage: python scripts/hash_pin.py
"""

import getpass
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from app.core.security import security
from app.utils.validators import check_pin_format


def read_pin() -> str:
    """Get PIN from user input."""
    while True:
        pin = getpass.getpass("PIN: ")

        is_valid, errors = check_pin_format(pin)
        if not is_valid:
            print("\nPIN does not meet requirements:")
            for error in errors:
                print(f"  - {error}")
            print()
            continue

        if getpass.getpass("Confirm PIN: ") != pin:
            print("PINs do not match. Please try again.")
            continue

        return pin


def main():
    """Main function."""
    print("PIN Gate PIN hash generator")
    print("=" * 50)

    pin_hash = security.hash_pin(read_pin())

    print("\n" + "=" * 50)
    print(f"PIN_HASH='{pin_hash}'")
    print("=" * 50)


if __name__ == "__main__":
    main()
