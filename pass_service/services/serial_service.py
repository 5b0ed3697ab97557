"""
Serial Service
Generates the short human-facing serial behind every pass, e.g. AUR-4821.
"""

import secrets

SERIAL_MIN = 1000
SERIAL_MAX = 9999

_system_random = secrets.SystemRandom()


def generate_serial(prefix="AUR", rng=None):
    """
    Collisions between serials are possible and harmless: the stored
    secret is a salted digest, so two equal serials still get distinct
    credentials.
    """
    rng = rng or _system_random
    return f"{prefix}-{rng.randint(SERIAL_MIN, SERIAL_MAX)}"
