from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import yaml
from rapidfuzz import fuzz

# ----------------------------
# Paths / Folder structure
# ----------------------------


@dataclass(frozen=True)
class ProjectPaths:
    root: Path
    data_cache: Path
    data_logs: Path

    @staticmethod
    def from_root(root: str | Path) -> ProjectPaths:
        rootp = Path(root).resolve()
        return ProjectPaths(
            root=rootp,
            data_cache=rootp / "data" / "cache",
            data_logs=rootp / "data" / "logs",
        )

    def ensure(self) -> None:
        self.data_cache.mkdir(parents=True, exist_ok=True)
        self.data_logs.mkdir(parents=True, exist_ok=True)


# ----------------------------
# Input helpers
# ----------------------------


def parse_name_lines(text: str) -> list[str]:
    """Split pasted text into trimmed, non-blank names (duplicates are kept)."""
    return [line.strip() for line in str(text or "").splitlines() if line.strip()]


def read_name_lines(path: str | Path) -> list[str]:
    return parse_name_lines(Path(path).read_text(encoding="utf-8"))


# ----------------------------
# Name normalization
# ----------------------------


def normalize_game_name(name: str) -> str:
    """Lower-case and trim; catalog matching is plain containment on this form."""
    return str(name or "").strip().lower()


def fuzzy_score(a: str, b: str) -> int:
    """Similarity between two normalized names, 0..100."""
    return int(round(fuzz.ratio(normalize_game_name(a), normalize_game_name(b))))


# ----------------------------
# JSON Cache (with expiry)
# ----------------------------


def load_json_cache(path: str | Path, *, max_age_s: float | None = None) -> Any:
    """
    Load a JSON cache file, or None when it is missing, unreadable or older than `max_age_s`.
    """
    p = Path(path)
    if not p.exists():
        return None
    if max_age_s is not None:
        age = time.time() - p.stat().st_mtime
        if age > max_age_s:
            logging.debug(f"[CACHE] '{p.name}' expired ({age:.0f}s old)")
            return None
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logging.warning(f"[CACHE] Ignoring unreadable cache '{p.name}': {e}")
        return None


def save_json_cache(cache: Any, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(cache, ensure_ascii=False), encoding="utf-8")


# ----------------------------
# Rate limiting + cancellation
# ----------------------------


class CancellationToken:
    """
    Cooperative cancellation flag shared between a running loop and whoever wants it stopped.

    `wait()` doubles as an interruptible sleep: it returns early (True) once cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout_s: float) -> bool:
        return self._event.wait(timeout_s)


class RateLimiter:
    """
    Simple rate limiter: enforces minimum interval between requests.

    `clock` must be monotonic; it is injectable so pacing can be tested without sleeping.
    """

    def __init__(
        self,
        min_interval_s: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval_s = float(min_interval_s)
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    def remaining(self) -> float:
        if self._last is None:
            return 0.0
        return max(0.0, self.min_interval_s - (self._clock() - self._last))

    def mark(self) -> None:
        self._last = self._clock()

    def wait(self, cancel: CancellationToken | None = None) -> bool:
        """
        Block until the interval since the last request has elapsed, then mark a new request.

        Returns False (without marking) if `cancel` fired during the wait.
        """
        delay = self.remaining()
        if delay > 0:
            if cancel is not None:
                if cancel.wait(delay):
                    return False
            else:
                self._sleep(delay)
        self.mark()
        return True


# ----------------------------
# Credentials loading
# ----------------------------


def load_credentials(credentials_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load credentials from a YAML file.

    Args:
        credentials_path: Path to credentials.yaml file. If None, looks for
                         data/credentials.yaml in the project root.

    Returns:
        Dictionary with credentials (e.g., {'ggdeals': {'api_key': ...}}). Missing files yield
        an empty dict; the API key may also come from the command line or environment.
    """
    if credentials_path is None:
        root = Path(__file__).resolve().parent.parent.parent
        credentials_path = root / "data" / "credentials.yaml"
    else:
        credentials_path = Path(credentials_path)

    if not credentials_path.exists():
        logging.debug(f"Credentials file not found: {credentials_path}")
        return {}

    with open(credentials_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def resolve_api_key(
    explicit: str | None,
    credentials: dict[str, Any],
    *,
    env_var: str = "GGDEALS_API_KEY",
) -> str:
    """Pick the gg.deals key from (in order) the CLI flag, the environment, credentials.yaml."""
    if explicit and explicit.strip():
        return explicit.strip()
    env = os.environ.get(env_var, "").strip()
    if env:
        return env
    return str((credentials.get("ggdeals", {}) or {}).get("api_key", "") or "").strip()
