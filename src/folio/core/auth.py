"""
Authentication signal.

A small observable holding whether an operator session is active and whether
the session state is still being resolved. Consumers subscribe and react to
transitions; nothing here talks to the auth API.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthState:
    """Snapshot of the authentication signal."""

    is_authenticated: bool = False
    is_loading: bool = True

    @property
    def is_ready(self) -> bool:
        """True once a session is active and no longer loading."""
        return self.is_authenticated and not self.is_loading


AuthListener = Callable[[AuthState], None]


class AuthSignal:
    """Observable authentication state."""

    def __init__(self, is_authenticated: bool = False, is_loading: bool = True):
        self._state = AuthState(is_authenticated=is_authenticated, is_loading=is_loading)
        self._listeners: list[AuthListener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener for state transitions.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(
        self,
        is_authenticated: bool | None = None,
        is_loading: bool | None = None,
    ) -> None:
        """Change the state; listeners run only when something changed."""
        new_state = AuthState(
            is_authenticated=(
                self._state.is_authenticated if is_authenticated is None else is_authenticated
            ),
            is_loading=self._state.is_loading if is_loading is None else is_loading,
        )
        if new_state == self._state:
            return

        logger.debug("Auth state %s -> %s", self._state, new_state)
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    def login(self) -> None:
        """Mark the session as active and resolved."""
        self.update(is_authenticated=True, is_loading=False)

    def logout(self) -> None:
        """Mark the session as gone."""
        self.update(is_authenticated=False, is_loading=False)
