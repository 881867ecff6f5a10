"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks. The work
factor comes from settings (default 10 rounds, never lower).

The cost is stored inside the hash ("$2b$10$..."), so raising
TASKBOARD_BCRYPT_ROUNDS doesn't invalidate existing passwords. Hashes
below the configured cost are re-hashed at the next successful login.
"""

from functools import lru_cache

import bcrypt


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$". Passwords are truncated to 72 bytes
    (bcrypt's limit).
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def needs_rehash(password_hash: str, rounds: int) -> bool:
    """True if the hash was made with fewer rounds than `rounds`."""
    try:
        cost = int(password_hash.split("$")[2])
    except (IndexError, ValueError):
        return True
    return cost < rounds


@lru_cache
def dummy_hash(rounds: int) -> str:
    """A throwaway hash at `rounds` cost, for checks against a missing account."""
    return hash_password("taskboard-no-such-user", rounds)


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:72]
