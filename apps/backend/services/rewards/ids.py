import secrets
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_ALPHABET[r])
    return "".join(reversed(out))


def generate_id() -> str:
    """
    Client-facing record id: `<epoch millis in base36>-<6 random base36 chars>`.
    Kept alongside the store key as `_customId`.
    """
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"{_base36(millis)}-{suffix}"
