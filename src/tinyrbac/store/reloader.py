from __future__ import annotations

import json
import logging
import random
import threading
import time
from typing import Optional

from ..core.builder import build_from_policy
from ..core.checker import check
from ..core.errors import BuildError, PolicyDecodeError
from ..core.model import AccessModel, Decision
from ..core.ports import PolicySource
from .policy_loader import decode_policy

logger = logging.getLogger("tinyrbac.store")


class ModelHolder:
    """Holds the current AccessModel and swaps it atomically.

    Readers take a single attribute read and always see one complete model; they
    never lock. Models themselves are never mutated, only replaced.
    """

    def __init__(self, model: AccessModel) -> None:
        self._model = model
        self._lock = threading.Lock()

    @property
    def model(self) -> AccessModel:
        return self._model

    def swap(self, model: AccessModel) -> AccessModel:
        """Install *model*; returns the one it replaced."""
        with self._lock:
            old, self._model = self._model, model
        return old

    def check(self, role: str, resource: str, action: str) -> Decision:
        return check(self._model, role, resource, action)

    def is_allowed(self, role: str, resource: str, action: str) -> bool:
        return self.check(role, resource, action).allowed


class HotReloader:
    """
    Rebuilds the model when a PolicySource changes and swaps it into a ModelHolder.

    Features:
      - ETag-first logic: call source.etag() and only load/build when it changes.
      - Build errors keep the previous model in place.
      - Error suppression with exponential backoff + jitter to avoid log/IO storms.
      - Optional background polling loop with clean start/stop.

    Notes:
      - If source.etag() returns None, we load() and let the source decide.
      - holder.swap() is called only after a successful decode and build.
      - Thread-safe for concurrent check_and_reload() calls.
    """

    def __init__(
        self,
        holder: ModelHolder,
        source: PolicySource,
        *,
        poll_interval: float | None = 5.0,
        backoff_min: float = 2.0,
        backoff_max: float = 30.0,
        jitter_ratio: float = 0.15,
        thread_daemon: bool = True,
    ) -> None:
        self.holder = holder
        self.source = source
        self.poll_interval = poll_interval
        self.backoff_min = float(backoff_min)
        self.backoff_max = float(backoff_max)
        self.jitter_ratio = float(jitter_ratio)
        self.thread_daemon = bool(thread_daemon)

        try:
            self._last_etag: Optional[str] = self.source.etag()
        except OSError:
            self._last_etag = None
        self._suppress_until: float = 0.0
        self._backoff: float = self.backoff_min
        self._last_reload_at: float | None = None
        self._last_error: Exception | None = None

        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #

    def check_and_reload(self, *, force: bool = False) -> bool:
        """
        Perform a single reload check.

        Returns:
            True if a new model was built and swapped in; otherwise False.
        """
        now = time.time()
        with self._lock:
            if now < self._suppress_until and not force:
                return False

            try:
                etag = self.source.etag()
                if etag is not None and etag == self._last_etag and not force:
                    return False

                model = build_from_policy(decode_policy(self.source.load()))
                self.holder.swap(model)

                self._last_etag = etag
                self._last_reload_at = now
                self._last_error = None
                self._backoff = self.backoff_min
                logger.info("tinyrbac: policy reloaded from %s", self._src_name())
                return True

            except PolicyDecodeError as e:
                if isinstance(e.__cause__, FileNotFoundError):
                    self._register_error(now, e, level="warning", msg="tinyrbac: policy not found: %s")
                else:
                    self._register_error(now, e, level="error", msg="tinyrbac: invalid policy document")
            except (json.JSONDecodeError, ValueError) as e:
                self._register_error(now, e, level="error", msg="tinyrbac: invalid policy document")
            except BuildError as e:
                self._register_error(now, e, level="error", msg="tinyrbac: policy rejected, keeping current model")
            except FileNotFoundError as e:
                self._register_error(now, e, level="warning", msg="tinyrbac: policy not found: %s")
            except Exception as e:  # pragma: no cover
                self._register_error(now, e, level="error", msg="tinyrbac: policy reload error")

            return False

    def start(self, interval: float | None = None) -> None:
        """
        Start the background polling thread.

        Args:
            interval: seconds between checks; if None, uses self.poll_interval (or 5.0 fallback).
        """
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            poll_iv = float(interval if interval is not None else (self.poll_interval or 5.0))
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop, args=(poll_iv,), daemon=self.thread_daemon
            )
            self._thread.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        """Signal the polling thread to stop and wait for it."""
        with self._lock:
            thread = self._thread
            if not thread:
                return
            self._stop_event.set()
        thread.join(timeout=timeout)
        with self._lock:
            if self._thread is thread and not thread.is_alive():
                self._thread = None

    # --------------------------------------------------------------------- #
    # Diagnostics
    # --------------------------------------------------------------------- #

    @property
    def last_etag(self) -> Optional[str]:
        with self._lock:
            return self._last_etag

    @property
    def last_reload_at(self) -> float | None:
        with self._lock:
            return self._last_reload_at

    @property
    def last_error(self) -> Exception | None:
        with self._lock:
            return self._last_error

    @property
    def suppressed_until(self) -> float:
        with self._lock:
            return self._suppress_until

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _src_name(self) -> str:
        path = getattr(self.source, "path", None)
        return path if isinstance(path, str) else self.source.__class__.__name__

    def _register_error(self, now: float, err: Exception, *, level: str, msg: str) -> None:
        """Log, advance the backoff window with jitter, and set suppression."""
        self._last_error = err

        log_args: tuple[object, ...] = ()
        if "%s" in msg:
            log_args = (self._src_name(),)

        if level == "warning":
            logger.warning(msg, *log_args)
        else:
            logger.error(msg + ": %s", *log_args, err)

        self._backoff = min(self.backoff_max, max(self.backoff_min, self._backoff * 2.0))
        jitter = self._backoff * self.jitter_ratio * random.uniform(-1.0, 1.0)
        self._suppress_until = now + max(0.2, self._backoff + jitter)

    def _run_loop(self, base_interval: float) -> None:
        while not self._stop_event.is_set():
            try:
                self.check_and_reload()
            except Exception as e:  # pragma: no cover
                logger.exception("tinyrbac: reloader loop error", exc_info=e)

            now = time.time()
            sleep_for = base_interval
            with self._lock:
                if now < self._suppress_until:
                    sleep_for = min(sleep_for, max(0.2, self._suppress_until - now))

            jitter = base_interval * self.jitter_ratio * random.uniform(-1.0, 1.0)
            sleep_for = max(0.2, sleep_for + jitter)

            # Wait in small chunks so stop() interrupts promptly.
            end = time.time() + sleep_for
            while not self._stop_event.is_set():
                remaining = end - time.time()
                if remaining <= 0:
                    break
                self._stop_event.wait(timeout=min(0.5, remaining))


__all__ = ["ModelHolder", "HotReloader"]
