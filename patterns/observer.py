"""
Observer pattern for pool lifecycle events.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Tuple
from utils.logging_config import get_logger

logger = get_logger(__name__)

WILDCARD = '*'


class Observer(ABC):
    """Abstract observer base class."""

    @abstractmethod
    def update(self, subject: 'Subject', event: str, data: Any):
        """Called when subject state changes."""
        pass


class Subject:
    """Subject that notifies observers of changes."""

    def __init__(self):
        self._observers: Dict[str, List[Observer]] = {}

    def attach(self, observer: Observer, event: str = WILDCARD):
        """Attach an observer for a specific event or all events."""
        observers = self._observers.setdefault(event, [])
        if observer not in observers:
            observers.append(observer)
            logger.debug(f"Attached observer {observer.__class__.__name__} for event '{event}'")

    def detach(self, observer: Observer, event: str = WILDCARD):
        """Detach an observer from a specific event or all events."""
        observers = self._observers.get(event, [])
        if observer in observers:
            observers.remove(observer)
            logger.debug(f"Detached observer {observer.__class__.__name__} from event '{event}'")

    def notify(self, event: str, data: Any = None):
        """
        Notify observers of an event.

        Observer failures are logged and never propagate into the subject.
        """
        targets = list(self._observers.get(event, [])) + list(self._observers.get(WILDCARD, []))
        for observer in targets:
            try:
                observer.update(self, event, data)
            except Exception as e:
                logger.error(
                    f"Observer {observer.__class__.__name__} failed on '{event}': {e}",
                    exc_info=True
                )


class CallbackObserver(Observer):
    """Observer that calls a callback function."""

    def __init__(self, callback: Callable[[Subject, str, Any], None]):
        self.callback = callback

    def update(self, subject: Subject, event: str, data: Any):
        self.callback(subject, event, data)


class EventRecorder(Observer):
    """Observer that keeps every (event, data) pair it receives."""

    def __init__(self):
        self.events: List[Tuple[str, Any]] = []

    def update(self, subject: Subject, event: str, data: Any):
        self.events.append((event, data))

    def names(self) -> List[str]:
        """Event names in arrival order."""
        return [event for event, _ in self.events]

    def clear(self):
        self.events.clear()
