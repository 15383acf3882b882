"""Observable display mode slot shared by the coordinator and the UI layer."""

import logging
from typing import Callable, List

from contentrouter.core.modes import DisplayMode

logger = logging.getLogger(__name__)

Observer = Callable[[DisplayMode], None]


class DisplayModeState:
    """Single-value observable holding the current display mode.

    Starts in loading mode. Observers are called synchronously, in
    subscription order, every time a new value is published.
    """

    def __init__(self) -> None:
        self._value = DisplayMode.loading()
        self._observers: List[Observer] = []

    @property
    def value(self) -> DisplayMode:
        """Current display mode."""
        return self._value

    @property
    def is_terminal(self) -> bool:
        return self._value.is_terminal

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer and return a callable that removes it.

        The observer is called immediately with the current value so late
        subscribers still see a terminal mode that was already published.
        """
        self._observers.append(observer)
        observer(self._value)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def publish(self, mode: DisplayMode, force: bool = False) -> bool:
        """Publish a new display mode.

        Args:
            mode: Mode to publish
            force: Replace a terminal mode (used by the 4xx callback only)

        Returns:
            True if the value changed, False if the publication was rejected
        """
        if self._value.is_terminal and not force:
            logger.warning(
                f"Ignoring {mode}: display mode already settled on {self._value}"
            )
            return False
        if self._value == mode:
            return False

        self._value = mode
        for observer in list(self._observers):
            observer(mode)
        return True
