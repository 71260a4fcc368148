"""Credential / payload redaction for safe debug dumps.

Before any WordPress request or response is written to logs or stderr the
:func:`redact` function must be applied.  It enforces the following rules:

* **Authorization headers** and keys that look like secrets are replaced
  with a masked placeholder that shows only the last four characters of
  the application password (or a generic marker).
* ``Basic <base64>`` credentials are masked wherever they appear.
* **Binary values** (media upload bodies) are replaced with
  ``<binary:N_bytes>``.
* Rendered post ``content`` longer than a threshold is truncated so dumps
  stay readable.
* The application password itself is **never present** in the output.
"""

from __future__ import annotations

import copy
import re
from typing import Any

# Substrings: if any of these appear in a key name (case-insensitive), the
# value is redacted.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "credential",
    "authorization",
    "cookie",
    "api_key",
})

_BASIC_RE = re.compile(r"(Basic\s+)\S+")

_CONTENT_PREVIEW_CHARS = 500


def _mask_secret(value: str, secret: str | None) -> str:
    """Replace the secret and any Basic credential with a placeholder."""
    if secret and secret in value:
        suffix = secret[-4:] if len(secret) >= 4 else "****"
        placeholder = f"<redacted:...{suffix}>"
        if secret in placeholder:
            placeholder = "<redacted>"
        value = value.replace(secret, placeholder)
    return _BASIC_RE.sub(lambda m: f"{m.group(1)}<redacted>", value)


def _redact_value(key: str, value: Any, secret: str | None) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, secret)
    if isinstance(value, list):
        return [_redact_value(key, item, secret) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return f"<binary:{len(value)}_bytes>"
    if isinstance(value, str):
        if key == "content" and len(value) > _CONTENT_PREVIEW_CHARS:
            value = f"{value[:_CONTENT_PREVIEW_CHARS]}...<{len(value)}_chars>"
        return _mask_secret(value, secret)
    return value


def _redact_dict(d: dict, secret: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            if isinstance(value, str):
                result[key] = _mask_secret(value, secret)
            else:
                result[key] = "<redacted>"
        else:
            result[key] = _redact_value(key_lower, value, secret)
    return result


def redact(payload: dict, secret: str | None = None) -> dict:
    """Return a deep copy of *payload* with sensitive data redacted.

    Parameters
    ----------
    payload:
        The dictionary to sanitize (a request body, headers, or a dump
        envelope containing both).
    secret:
        The application password.  If supplied, any occurrence of this
        exact string anywhere in the payload is replaced.

    Returns
    -------
    dict
        A new dictionary with all sensitive data removed.  The original
        *payload* is never mutated.

    Examples
    --------
    >>> redact({"Authorization": "Basic YWRtaW46c2VjcmV0"})
    {'Authorization': 'Basic <redacted>'}
    """
    safe = copy.deepcopy(payload)
    return _redact_dict(safe, secret)
