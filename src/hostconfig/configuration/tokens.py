"""
Change Tokens

One-shot change notification primitives shared by providers and the
aggregator. A ``ReloadToken`` fires at most once; whoever owns it swaps in a
fresh token before firing the old one, and listeners that want to keep
observing re-subscribe through ``on_change``.
"""

import asyncio
import threading
from typing import Any, Callable, List, Optional

from ..infrastructure.observability.factory import get_configuration_logger

ChangeCallback = Callable[[Any], None]


class CallbackRegistration:
    """Handle returned by ``ReloadToken.register_change_callback``."""

    def __init__(self, token: Optional['ReloadToken'], callback: ChangeCallback, state: Any = None):
        self._token = token
        self._callback = callback
        self._state = state
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    def _invoke(self) -> None:
        if self._active:
            self._active = False
            self._callback(self._state)

    def dispose(self) -> None:
        """Detach the callback; a no-op once the token has fired."""
        if not self._active:
            return
        self._active = False
        if self._token is not None:
            self._token._unregister(self)
            self._token = None


class ReloadToken:
    """
    Single-fire change signal.

    Callbacks registered before ``on_reload`` run exactly once when it is
    called; callbacks registered afterwards run immediately on the
    registering thread. Calling ``on_reload`` again is a no-op.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._changed = False
        self._registrations: List[CallbackRegistration] = []

    @property
    def has_changed(self) -> bool:
        with self._lock:
            return self._changed

    def register_change_callback(self, callback: ChangeCallback, state: Any = None) -> CallbackRegistration:
        """
        Register ``callback(state)`` to run when the token fires.

        Returns:
            CallbackRegistration: dispose it to stop listening
        """
        with self._lock:
            if not self._changed:
                registration = CallbackRegistration(self, callback, state)
                self._registrations.append(registration)
                return registration

        registration = CallbackRegistration(None, callback, state)
        registration._invoke()
        return registration

    def _unregister(self, registration: CallbackRegistration) -> None:
        with self._lock:
            if registration in self._registrations:
                self._registrations.remove(registration)

    def on_reload(self) -> None:
        """Fire the token, running every registered callback once."""
        with self._lock:
            if self._changed:
                return
            self._changed = True
            registrations, self._registrations = self._registrations, []

        errors: List[Exception] = []
        for registration in registrations:
            try:
                registration._invoke()
            except Exception as e:
                errors.append(e)

        if errors:
            if len(errors) > 1:
                get_configuration_logger("tokens").error(
                    "Multiple reload callbacks failed",
                    extra={"failures": [f"{type(e).__name__}: {e}" for e in errors]}
                )
            raise errors[0]

    def __repr__(self) -> str:
        return f"ReloadToken(has_changed={self.has_changed})"


class ChangeTokenRegistration:
    """
    Keeps ``consumer`` subscribed across successive tokens from ``producer``.

    Each time the current token fires, the producer is asked for its next
    token before the consumer runs, so a fire that happens while the consumer
    is still running is not lost.
    """

    def __init__(self, producer: Callable[[], Optional[ReloadToken]], consumer: Callable[[], None]):
        self._producer = producer
        self._consumer = consumer
        self._lock = threading.Lock()
        self._disposed = False
        self._registration: Optional[CallbackRegistration] = None

        self._register_token(producer())

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _on_change_token_fired(self, _state: Any = None) -> None:
        with self._lock:
            if self._disposed:
                return

        token = self._producer()
        with self._lock:
            if self._disposed:
                return

        try:
            self._consumer()
        finally:
            self._register_token(token)

    def _register_token(self, token: Optional[ReloadToken]) -> None:
        if token is None:
            return

        registration = token.register_change_callback(self._on_change_token_fired)
        with self._lock:
            if not self._disposed:
                self._registration = registration
                return
        registration.dispose()

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            registration, self._registration = self._registration, None

        if registration is not None:
            registration.dispose()


def on_change(producer: Callable[[], Optional[ReloadToken]], consumer: Callable[[], None]) -> ChangeTokenRegistration:
    """
    Invoke ``consumer`` every time the token returned by ``producer`` fires.

    Args:
        producer: Returns the current token, called again after each fire
        consumer: Called once per observed fire

    Returns:
        ChangeTokenRegistration: dispose it to stop observing
    """
    return ChangeTokenRegistration(producer, consumer)


async def wait_for_reload(configuration: Any, timeout: Optional[float] = None) -> None:
    """
    Wait until the configuration's current reload token fires.

    The fire may come from any thread, such as a file watcher.

    Raises:
        asyncio.TimeoutError: if ``timeout`` seconds pass first
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _set_result() -> None:
        if not future.done():
            future.set_result(None)

    def _on_reload(_state: Any) -> None:
        loop.call_soon_threadsafe(_set_result)

    registration = configuration.get_reload_token().register_change_callback(_on_reload)
    try:
        await asyncio.wait_for(future, timeout)
    finally:
        registration.dispose()
