"""Process-wide extension hooks for the rendering pipeline.

Listeners are registered per event name and run synchronously in priority
order. Each listener receives the current value plus keyword parameters and
may return a replacement; returning ``None`` keeps the value unchanged.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[..., Any]

GREENTEXT_HOOK = "comment.greentext"
INTERNAL_LINK_HOOK = "comment.internal_link"
EXTERNAL_LINK_HOOK = "comment.external_link"
BEFORE_CLEAN_HOOK = "comment.before_clean"


@dataclass(order=True)
class _Registration:
    priority: int
    sequence: int
    listener: Listener = field(compare=False)


class HookRegistry:
    """Registry of listeners keyed by event name."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Registration]] = defaultdict(list)
        self._sequence = 0

    def register(self, event: str, listener: Listener, *, priority: int = 5) -> Listener:
        """Attach ``listener`` to ``event``; lower priorities run first."""
        self._sequence += 1
        registrations = self._listeners[event]
        registrations.append(_Registration(priority, self._sequence, listener))
        registrations.sort()
        return listener

    def unregister(self, event: str, listener: Listener) -> None:
        registrations = self._listeners.get(event, [])
        self._listeners[event] = [r for r in registrations if r.listener is not listener]

    def listen(self, event: str, *, priority: int = 5) -> Callable[[Listener], Listener]:
        """Decorator form of :meth:`register`."""

        def decorator(listener: Listener) -> Listener:
            return self.register(event, listener, priority=priority)

        return decorator

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def dispatch(self, event: str, value: T, **params: Any) -> T:
        """Run every listener of ``event`` over ``value`` and return the result.

        A listener that raises is logged and skipped so one broken plugin
        cannot stop a post from rendering.
        """
        for registration in list(self._listeners.get(event, [])):
            try:
                result = registration.listener(value, **params)
            except Exception:
                logger.exception("Hook listener for %s failed; keeping current value", event)
                continue
            if result is not None:
                value = result
        return value

    def clear(self) -> None:
        self._listeners.clear()
        self._sequence = 0


_HOOK_REGISTRY: HookRegistry | None = None


def init_hooks() -> HookRegistry:
    """Create the process-wide registry if it does not exist yet."""
    global _HOOK_REGISTRY
    if _HOOK_REGISTRY is None:
        _HOOK_REGISTRY = HookRegistry()
    return _HOOK_REGISTRY


def get_hook_registry() -> HookRegistry:
    """Return the process-wide hook registry, creating it on first use."""
    return init_hooks()


def reset_hooks() -> None:
    """Drop every registered listener and the registry itself."""
    global _HOOK_REGISTRY
    if _HOOK_REGISTRY is not None:
        _HOOK_REGISTRY.clear()
    _HOOK_REGISTRY = None
