"""Cache key derivation for suggestion jobs."""

from __future__ import annotations

import hashlib
import re
from urllib.parse import unquote_to_bytes

JOB_KEY_PREFIX = "suggest_"

_CONTROL_CHARACTERS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def normalize_url_for_cache_key(url: str) -> str:
    """Canonicalize a requested URL so equivalent requests share one job.

    The URL is trimmed, percent-decoded once, stripped of invalid UTF-8 and
    control characters, and cut at the first `?` so query ordering and
    tracking parameters never split a job.
    """

    if not url:
        return ""

    decoded = unquote_to_bytes(url.strip()).decode("utf-8", errors="ignore")
    cleaned = _CONTROL_CHARACTERS.sub("", decoded)
    return cleaned.split("?", 1)[0].strip()


def derive_job_key(normalized_url: str) -> str:
    """Return the store key for the job serving an already normalized URL.

    The input is hashed as given. Normalization percent-decodes, so applying
    it twice to the same URL can change the key.
    """

    digest = hashlib.sha256(normalized_url.encode("utf-8")).hexdigest()
    return f"{JOB_KEY_PREFIX}{digest}"


__all__ = ["JOB_KEY_PREFIX", "derive_job_key", "normalize_url_for_cache_key"]
