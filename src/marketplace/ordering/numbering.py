"""Human-readable order numbers: ``ORD-<6 digits>-<3 digits>``."""

import secrets
import time


def generate_order_number() -> str:
    """Build a number from the clock and a random suffix.

    Not unique on its own; placement checks it against stored orders.
    """
    millis = int(time.time() * 1000)
    return f"ORD-{millis % 1_000_000:06d}-{secrets.randbelow(1000):03d}"
