"""Parameterless "data changed" signal for display consumers."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

type Listener = Callable[[], None]


@dataclass(kw_only=True)
class ChangeNotifier:
    """Publish a signal when cached execution data changes.

    Listeners receive no payload and re-pull through the tree projector.
    """

    _listeners: list[Listener] = field(default_factory=list, init=False, repr=False)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        """Call every listener; a failing listener does not stop the others."""
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                log.exception("Change listener %r failed", listener)
