import re

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    cleaned = email.strip()
    if not cleaned:
        return False
    return bool(_EMAIL_RE.match(cleaned))
