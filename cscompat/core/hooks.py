import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Tuple

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10

# (tag, callback, priority) as passed to add_filter
HookRecord = Tuple[str, Callable, int]


class HookManager:
    """
    Filter/action bus shared by the host and its plugins.
    Callbacks run by ascending priority, then in registration order.
    """

    def __init__(self):
        # tag -> priority -> [(callback, accepted_args)]
        self._hooks: Dict[str, Dict[int, List[Tuple[Callable, int]]]] = {}
        self._recorders: List[List[HookRecord]] = []

    def add_filter(self, tag: str, callback: Callable, priority: int = DEFAULT_PRIORITY, accepted_args: int = 1) -> None:
        """
        Subscribe a callback to a tag.
        :param accepted_args: Number of positional arguments passed to the callback.
        """
        by_priority = self._hooks.setdefault(tag, {})
        by_priority.setdefault(priority, []).append((callback, accepted_args))
        for recorded in self._recorders:
            recorded.append((tag, callback, priority))
        logger.debug(f"Hook added: {tag} -> {getattr(callback, '__name__', callback)} (priority {priority})")

    # Actions and filters share one table
    add_action = add_filter

    def remove_filter(self, tag: str, callback: Callable, priority: int = DEFAULT_PRIORITY) -> bool:
        callbacks = self._hooks.get(tag, {}).get(priority, [])
        for entry in callbacks:
            if entry[0] == callback:
                callbacks.remove(entry)
                return True
        return False

    def remove_all(self, records: List[HookRecord]) -> None:
        """Undo registrations captured by recording()."""
        for tag, callback, priority in records:
            self.remove_filter(tag, callback, priority)

    @contextmanager
    def recording(self) -> Iterator[List[HookRecord]]:
        """
        Capture every hook added inside the block, e.g. while a plugin module runs.
        """
        records: List[HookRecord] = []
        self._recorders.append(records)
        try:
            yield records
        finally:
            self._recorders.remove(records)

    def has_filter(self, tag: str) -> bool:
        return any(self._hooks.get(tag, {}).values())

    def _callbacks(self, tag: str) -> List[Tuple[Callable, int]]:
        by_priority = self._hooks.get(tag, {})
        ordered = []
        for priority in sorted(by_priority):
            # Copy so callbacks may (un)register hooks while running
            ordered.extend(list(by_priority[priority]))
        return ordered

    def apply_filters(self, tag: str, value: Any, *args: Any) -> Any:
        """
        Pass value through every callback registered for tag.
        Each callback's return value becomes the input of the next one.
        """
        for callback, accepted_args in self._callbacks(tag):
            params = (value,) + args
            value = callback(*params[:max(accepted_args, 0)])
        return value

    def do_action(self, tag: str, *args: Any) -> None:
        """Run every callback registered for tag, ignoring return values."""
        for callback, accepted_args in self._callbacks(tag):
            callback(*args[:max(accepted_args, 0)])
