"""Extension hook chains.

A chain is an ordered list of handlers; each handler receives the value
returned by the previous one plus the chain's extra arguments. Handlers
may be scoped with modifiers (e.g. name="core/paragraph") so they only
run for matching blocks or fields.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from .models import FieldHookMeta, ParsedBlock, RawBlock

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10


@dataclass
class _Handler:
    callback: Callable[..., Any]
    priority: int
    order: int
    modifiers: Dict[str, Any] = field(default_factory=dict)

    def matches(self, subject: Dict[str, Any]) -> bool:
        return all(subject.get(key) == value for key, value in self.modifiers.items())


class HookChain:
    """Ordered, chainable filter pipeline."""

    def __init__(
        self,
        name: str,
        modifier_keys: FrozenSet[str] = frozenset(),
        subject: Optional[Callable[[Any, Tuple[Any, ...]], Dict[str, Any]]] = None,
    ):
        """
        Args:
            name: Chain name (for logging)
            modifier_keys: Modifier keywords handlers may be scoped by
            subject: Computes modifier values from (value, args) at apply time
        """
        self.name = name
        self.modifier_keys = modifier_keys
        self._subject = subject
        self._handlers: List[_Handler] = []
        self._counter = 0

    def add(self, callback: Callable[..., Any], priority: int = DEFAULT_PRIORITY, **modifiers: Any):
        """
        Register a handler.

        Lower priority runs first; equal priorities keep registration order.
        Returns the callback unchanged.

        Raises:
            ValueError: If an unknown modifier is given
        """
        unknown = set(modifiers) - self.modifier_keys
        if unknown:
            raise ValueError(
                f"Unknown modifier(s) for hook '{self.name}': {sorted(unknown)}. "
                f"Available: {sorted(self.modifier_keys)}"
            )

        self._handlers.append(_Handler(callback, priority, self._counter, dict(modifiers)))
        self._counter += 1
        self._handlers.sort(key=lambda h: (h.priority, h.order))
        logger.debug(f"Registered '{self.name}' hook: {getattr(callback, '__name__', callback)}")
        return callback

    def remove(self, callback: Callable[..., Any]) -> bool:
        """Unregister every registration of callback. Returns True if any was removed."""
        before = len(self._handlers)
        self._handlers = [h for h in self._handlers if h.callback is not callback]
        return len(self._handlers) != before

    def clear(self) -> None:
        self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    def apply(self, value: Any, *args: Any) -> Any:
        """Run value through every matching handler in order."""
        if not self._handlers:
            return value

        subject = self._subject(value, args) if self._subject else {}
        for handler in self._handlers:
            if handler.modifiers and not handler.matches(subject):
                continue
            value = handler.callback(value, *args)
        return value


def _block_subject(value: Any, args: Tuple[Any, ...]) -> Dict[str, Any]:
    return {"name": value.name, "type": value.type}


def _rendered_subject(value: Any, args: Tuple[Any, ...]) -> Dict[str, Any]:
    return _block_subject(args[0], ())


def _field_subject(value: Any, args: Tuple[Any, ...]) -> Dict[str, Any]:
    meta: FieldHookMeta = args[1]
    return {"name": meta.name, "type": meta.type, "block_name": meta.block_name}


class HookRegistry:
    """The parser's hook points.

    - block: (block: ParsedBlock, raw: RawBlock, content_id) -> ParsedBlock
    - field: (value, descriptor: FieldDescriptor, meta: FieldHookMeta) -> value
    - include_rendered: (include: bool, block: ParsedBlock) -> bool
    """

    def __init__(self):
        self.block = HookChain("block", frozenset({"name", "type"}), _block_subject)
        self.field = HookChain("block/field", frozenset({"name", "type", "block_name"}), _field_subject)
        self.include_rendered = HookChain("block/include_rendered", frozenset({"name", "type"}), _rendered_subject)

    def apply_block(self, block: ParsedBlock, raw: RawBlock, content_id: Any) -> ParsedBlock:
        return self.block.apply(block, raw, content_id)

    def apply_field(self, value: Any, descriptor: Any, meta: FieldHookMeta) -> Any:
        return self.field.apply(value, descriptor, meta)

    def apply_include_rendered(self, include: bool, block: ParsedBlock) -> bool:
        return bool(self.include_rendered.apply(include, block))
