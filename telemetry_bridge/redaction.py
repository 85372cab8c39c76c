"""
Property Redaction

Masks the values of sensitive properties before they leave the process.
A key is sensitive when its lowercased form contains any configured
substring; the key itself is always kept so the backend still sees that
the property was reported.
"""

from collections.abc import Iterable, Mapping

REDACTED = "[REDACTED]"


def is_sensitive_key(key: str, sensitive_keys: Iterable[str]) -> bool:
    """Check if a property key matches any sensitive substring (case-insensitive)."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in sensitive_keys)


def redact(
    properties: Mapping[str, str] | None, sensitive_keys: Iterable[str]
) -> dict[str, str] | None:
    """
    Return a copy of the properties with sensitive values replaced by ``[REDACTED]``.

    The input mapping is never mutated. An empty sensitive-key set disables
    redaction entirely.

    Args:
        properties: String property mapping, may be None
        sensitive_keys: Lowercase substrings marking a key as sensitive

    Returns:
        Redacted copy with the same keys, or None when properties is None
    """
    if properties is None:
        return None

    sensitive_keys = [key.lower() for key in sensitive_keys if key]
    if not sensitive_keys:
        return dict(properties)

    return {
        key: REDACTED if is_sensitive_key(key, sensitive_keys) else value
        for key, value in properties.items()
    }
