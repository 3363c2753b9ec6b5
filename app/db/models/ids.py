import secrets
import string

_ALPHABET = string.ascii_letters + string.digits + "_-"


def new_id(size: int = 15) -> str:
    """URL-safe random id for activation and transaction rows."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(size))
