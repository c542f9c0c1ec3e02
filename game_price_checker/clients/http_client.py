from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import requests

from ..config import REQUEST
from ..errors import NetworkFailure
from ..utils.utilities import RateLimiter

_NETWORK_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.SSLError,
)


@dataclass
class HTTPJSONClient:
    """
    Small helper to standardize request + rate limiting + stats counting.

    Provider clients pass in their own `requests.Session`, `stats` dict, and the desired
    rate limiter + counter key per endpoint. Requests are attempted once; any failure is raised
    as `NetworkFailure` so callers decide what a failure means for their records.
    """

    session: requests.Session
    stats: dict[str, Any] | None = None
    # Values (API keys) scrubbed from logged and raised messages; request errors embed URLs.
    secrets: tuple[str, ...] = ()

    def _redact(self, text: object) -> str:
        out = str(text)
        for secret in self.secrets:
            if secret:
                out = out.replace(secret, "***")
        return out

    def _bump(self, key: str) -> None:
        if self.stats is None:
            return
        self.stats[key] = int(self.stats.get(key, 0) or 0) + 1

    def _bump_ms(self, key: str, elapsed_ms: int) -> None:
        if self.stats is None:
            return
        ms_key = f"{key}_ms"
        self.stats[ms_key] = int(self.stats.get(ms_key, 0) or 0) + int(elapsed_ms)

    @staticmethod
    def format_timing(stats: dict[str, Any] | None, *, key: str) -> str:
        """
        Format request counter for a key tracked via `_bump()`.
        """
        if not stats:
            return f"{key}=0"
        return f"{key}={int(stats.get(key, 0) or 0)} {key}_ms={int(stats.get(f'{key}_ms', 0) or 0)}"

    def _send(
        self,
        method: str,
        url: str,
        *,
        ratelimiter: RateLimiter | None,
        counter_key: str,
        context: str,
        **kwargs: Any,
    ) -> Any:
        if ratelimiter is not None:
            ratelimiter.wait()
        self._bump(counter_key)
        t0 = time.perf_counter()
        try:
            r = getattr(self.session, method)(url, **kwargs)
            r.raise_for_status()
            data = r.json()
        except requests.exceptions.HTTPError as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            self._bump("http_failures")
            logging.error(f"[HTTP] {context}: {type(e).__name__}: {self._redact(e)}")
            raise NetworkFailure(
                f"{context} responded with status: {status}", context=context, status=status
            ) from e
        except _NETWORK_ERRORS as e:
            self._bump("network_failures")
            logging.error(f"[NETWORK] {context}: {type(e).__name__}: {self._redact(e)}")
            raise NetworkFailure(
                f"{context} is unreachable: {self._redact(e)}", context=context
            ) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            # ValueError covers undecodable JSON bodies.
            self._bump("request_failures")
            logging.error(f"[REQUEST] {context}: {type(e).__name__}: {self._redact(e)}")
            raise NetworkFailure(f"{context} failed: {self._redact(e)}", context=context) from e
        finally:
            self._bump_ms(counter_key, int(round((time.perf_counter() - t0) * 1000.0)))
        return data

    def get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        ratelimiter: RateLimiter | None = None,
        timeout_s: float = REQUEST.timeout_s,
        counter_key: str = "http_get",
        context: str,
    ) -> Any:
        kwargs: dict[str, Any] = {"timeout": timeout_s}
        if params is not None:
            kwargs["params"] = params
        if headers is not None:
            kwargs["headers"] = headers
        return self._send(
            "get", url, ratelimiter=ratelimiter, counter_key=counter_key, context=context, **kwargs
        )

    def post_json(
        self,
        url: str,
        *,
        json_body: Any | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        ratelimiter: RateLimiter | None = None,
        timeout_s: float = REQUEST.timeout_s,
        counter_key: str = "http_post",
        context: str,
    ) -> Any:
        kwargs: dict[str, Any] = {"timeout": timeout_s}
        if params is not None:
            kwargs["params"] = params
        if headers is not None:
            kwargs["headers"] = headers
        if json_body is not None:
            kwargs["json"] = json_body
        return self._send(
            "post", url, ratelimiter=ratelimiter, counter_key=counter_key, context=context, **kwargs
        )


@dataclass
class HTTPRequestDefaults:
    ratelimiter: RateLimiter | None = None
    timeout_s: float = REQUEST.timeout_s
    headers: dict[str, str] | None = None
    counter_key: str = "http_get"
    context_prefix: str | None = None


@dataclass
class ConfiguredHTTPJSONClient:
    """
    Convenience wrapper over HTTPJSONClient that carries default parameters.

    This keeps provider code concise by instantiating a per-endpoint client configured with
    its rate limiter, counter key, headers, etc.
    """

    http: HTTPJSONClient
    defaults: HTTPRequestDefaults

    def _ctx(self, context: str) -> str:
        prefix = self.defaults.context_prefix
        if prefix:
            return f"{prefix}{': ' if context else ''}{context}"
        return context

    def get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        counter_key: str | None = None,
        context: str = "",
    ) -> Any:
        return self.http.get_json(
            url,
            params=params,
            headers=self.defaults.headers if headers is None else headers,
            ratelimiter=self.defaults.ratelimiter,
            timeout_s=self.defaults.timeout_s,
            counter_key=counter_key or self.defaults.counter_key,
            context=self._ctx(context),
        )

    def post_json(
        self,
        url: str,
        *,
        json_body: Any | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        counter_key: str | None = None,
        context: str = "",
    ) -> Any:
        return self.http.post_json(
            url,
            json_body=json_body,
            params=params,
            headers=self.defaults.headers if headers is None else headers,
            ratelimiter=self.defaults.ratelimiter,
            timeout_s=self.defaults.timeout_s,
            counter_key=counter_key or self.defaults.counter_key,
            context=self._ctx(context),
        )
