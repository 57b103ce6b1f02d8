# core/sanitizers.py
"""
Input sanitization for user-entered text (team names, notification copy,
registration answers). Everything typed by a participant or organiser goes
through here before being stored.
"""
import re
from typing import Optional

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def sanitize_text(text: Optional[str], max_length: Optional[int] = None, strip: bool = True) -> str:
    """
    Sanitize plain text input.

    - Strips leading/trailing whitespace
    - Removes control characters
    - Enforces maximum length (truncates)
    - Returns empty string for None input
    """
    if text is None:
        return ""

    if strip:
        text = text.strip()

    # Remove control characters except newlines and tabs
    text = _CONTROL_CHARS.sub('', text)

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def split_emails(raw) -> list[str]:
    """
    Accept a list or a comma/whitespace separated string of addresses.
    Order is kept, blanks and duplicates dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        parts = re.split(r'[\s,;]+', raw)
    else:
        parts = [str(p) for p in raw]

    seen = []
    for part in parts:
        email = normalize_email(part)
        if email and email not in seen:
            seen.append(email)
    return seen
