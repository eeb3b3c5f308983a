from __future__ import annotations

import atexit
import threading
from typing import Any, Callable, Optional

from loguru import logger

# Type aliases for the injected exit facility
CleanupFn = Callable[[], None]
RegisterFn = Callable[[CleanupFn], Any]
UnregisterFn = Callable[[CleanupFn], Any]


class ShutdownHook:
    """Install a flush-on-exit callback at most once per process lifetime.

    The exit facility is injected; it defaults to :mod:`atexit`. Passing
    ``register=None`` models an environment without one, in which case
    installation is silently skipped.
    """

    def __init__(
        self,
        register: Optional[RegisterFn] = atexit.register,
        unregister: Optional[UnregisterFn] = atexit.unregister,
    ) -> None:
        self._register = register
        self._unregister = unregister
        self._cleanup_fn: Optional[CleanupFn] = None
        self._installed = False
        self._lock = threading.Lock()

    @property
    def installed(self) -> bool:
        return self._installed

    def ensure_installed(self, cleanup_fn: CleanupFn, enabled: bool = True) -> bool:
        """Register ``cleanup_fn`` to run at exit unless already done.

        Returns:
            True if a hook is installed after the call
        """
        with self._lock:
            if self._installed:
                return True
            if not enabled or self._register is None:
                return False

            self._cleanup_fn = cleanup_fn
            self._register(self._run_cleanup)
            self._installed = True

        logger.debug("Registered a11y logger flush-on-exit hook")
        return True

    def reset(self) -> None:
        """Forget the installed hook, unregistering it where possible."""
        with self._lock:
            if self._installed and self._unregister is not None:
                self._unregister(self._run_cleanup)
            self._installed = False
            self._cleanup_fn = None

    def _run_cleanup(self) -> None:
        fn = self._cleanup_fn
        if fn is None:
            return
        try:
            fn()
        except Exception:  # noqa: BLE001
            logger.exception(f"Shutdown cleanup function {fn} raised")
