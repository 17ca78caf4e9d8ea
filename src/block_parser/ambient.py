"""Ambient "current content item" shared with render and field collaborators.

Collaborators that cannot take an explicit content id read it from here.
The parser repoints it around every collaborator call so a nested pass
(synced reference expansion) can never leave it pointing at another item.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Hashable, Iterator, Optional

logger = logging.getLogger(__name__)

_current_content: ContextVar[Optional[Hashable]] = ContextVar("current_content", default=None)


def get_current_content_id() -> Optional[Hashable]:
    return _current_content.get()


@contextmanager
def content_scope(content_id: Hashable) -> Iterator[None]:
    """Set the current content id for the duration of the block."""
    token = _current_content.set(content_id)
    try:
        yield
    finally:
        _current_content.reset(token)


@contextmanager
def ensure_content_scope(content_id: Hashable) -> Iterator[None]:
    """Repoint the current content id only if it drifted from content_id."""
    current = _current_content.get()
    if current == content_id:
        yield
        return

    logger.debug(f"Ambient content was {current!r}, resetting to {content_id!r}")
    with content_scope(content_id):
        yield
