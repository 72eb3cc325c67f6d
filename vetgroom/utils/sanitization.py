import html
import re
from typing import Any, Optional

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_string(value: Any) -> str:
    """
    Escape HTML special characters so a value can be interpolated into markup.
    None becomes an empty string.
    """
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def clean_text(value: Optional[str], max_length: int = 500) -> Optional[str]:
    """
    Normalize free text coming from forms: strip, drop control characters,
    collapse runs of whitespace.

    Raises:
        ValueError: If input exceeds max_length
    """
    if value is None:
        return None

    value = _CONTROL_CHARS.sub("", str(value))
    value = re.sub(r"\s+", " ", value).strip()

    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    return value or None
