import secrets
import string

CODE_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 4


def generate_event_code(couple_name: str, partner_name: str) -> str:
    """Build a join code like ``SARJAM-A1B2`` from the first letters of both names."""
    names = f"{couple_name.strip()[:3]}{partner_name.strip()[:3]}".upper()
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{names}-{suffix}"


def normalize_event_code(code: str) -> str:
    return code.strip().upper()
