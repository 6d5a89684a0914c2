"""Signed nonces binding poll requests to the response that started a job."""

from __future__ import annotations

import hashlib
import hmac

from notfound_suggestions.domain.clock import Clock, system_clock
from notfound_suggestions.domain.job_keys import derive_job_key, normalize_url_for_cache_key


class PollNonceSigner:
    """Issue and verify `<expires>.<signature>` poll nonces.

    A signer built without a secret is disabled: it issues no nonces and
    accepts every poll.
    """

    def __init__(
        self,
        secret: str | None,
        lifetime_seconds: int = 3600,
        clock: Clock = system_clock,
    ) -> None:
        self._secret = None if not secret else secret.encode("utf-8")
        self._lifetime_seconds = max(lifetime_seconds, 1)
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return self._secret is not None

    def issue(self, url: str) -> str | None:
        """Return a nonce valid for polling `url`."""

        if self._secret is None:
            return None
        expires = self._clock() + self._lifetime_seconds
        return f"{expires}.{self._signature(url, expires)}"

    def verify(self, url: str, nonce: str | None) -> bool:
        """Return whether `nonce` was issued for `url` and has not expired."""

        if self._secret is None:
            return True
        if not nonce:
            return False

        raw_expires, _, signature = nonce.partition(".")
        try:
            expires = int(raw_expires)
        except ValueError:
            return False
        if expires < self._clock():
            return False
        return hmac.compare_digest(signature, self._signature(url, expires))

    def _signature(self, url: str, expires: int) -> str:
        assert self._secret is not None
        message = f"{derive_job_key(normalize_url_for_cache_key(url))}:{expires}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()


__all__ = ["PollNonceSigner"]
