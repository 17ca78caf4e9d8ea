"""Shortcode expansion for rendered block output.

Supports enclosing ``[tag a="1"]content[/tag]``, self-closing ``[tag /]``
and bare ``[tag]`` forms. ``[[tag]]`` escapes a shortcode and is emitted
as ``[tag]``. Tags without a registered handler are left untouched.
"""

import logging
import re
from typing import Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)

ShortcodeAttrs = Dict[Union[str, int], str]
ShortcodeHandler = Callable[[ShortcodeAttrs, Optional[str], str], str]

_ATTR_PATTERN = re.compile(
    r"""([\w-]+)\s*=\s*"([^"]*)"(?:\s|$)"""
    r"""|([\w-]+)\s*=\s*'([^']*)'(?:\s|$)"""
    r"""|([\w-]+)\s*=\s*([^\s'"]+)(?:\s|$)"""
    r"""|"([^"]*)"(?:\s|$)"""
    r"""|'([^']*)'(?:\s|$)"""
    r"""|(\S+)(?:\s|$)"""
)


def parse_shortcode_attrs(text: str) -> ShortcodeAttrs:
    """Parse the attribute section of an opening shortcode tag.

    Named attributes are keyed by lowercased name; positional values are
    keyed by their index.
    """
    attrs: ShortcodeAttrs = {}
    position = 0
    for match in _ATTR_PATTERN.finditer(text.replace("\xa0", " ")):
        groups = match.groups()
        if groups[0] is not None:
            attrs[groups[0].lower()] = groups[1]
        elif groups[2] is not None:
            attrs[groups[2].lower()] = groups[3]
        elif groups[4] is not None:
            attrs[groups[4].lower()] = groups[5]
        else:
            positional = next(g for g in groups[6:] if g is not None)
            attrs[position] = positional
            position += 1
    return attrs


class ShortcodeProcessor:
    """Registry of shortcode handlers and the expander applying them."""

    def __init__(self):
        self._handlers: Dict[str, ShortcodeHandler] = {}
        self._pattern: Optional[re.Pattern] = None

    def register(self, tag: str, handler: ShortcodeHandler) -> None:
        """
        Register a handler for a shortcode tag.

        Args:
            tag: Shortcode name
            handler: (attrs, content, tag) -> replacement text; content is
                None for self-closing and bare forms

        Raises:
            ValueError: If the tag contains characters invalid in a shortcode name
        """
        if not tag or re.search(r"[<>&/\[\]\x00-\x20=]", tag):
            raise ValueError(f"Invalid shortcode name: {tag!r}")
        self._handlers[tag] = handler
        self._pattern = None
        logger.debug(f"Registered shortcode: {tag}")

    def unregister(self, tag: str) -> None:
        self._handlers.pop(tag, None)
        self._pattern = None

    def has(self, tag: str) -> bool:
        return tag in self._handlers

    def expand(self, content: str) -> str:
        """Replace every registered shortcode in content with its handler's output."""
        if not content or "[" not in content or not self._handlers:
            return content
        return self._get_pattern().sub(self._replace, content)

    def _get_pattern(self) -> re.Pattern:
        if self._pattern is None:
            tags = "|".join(re.escape(tag) for tag in sorted(self._handlers, key=len, reverse=True))
            self._pattern = re.compile(
                r"\[(\[?)"
                r"(" + tags + r")"
                r"(?![\w-])"
                r"([^\]/]*(?:/(?!\])[^\]/]*)*?)"
                r"(?:(/)\]|\](?:([^\[]*(?:\[(?!/\2\])[^\[]*)*)\[/\2\])?)"
                r"(\]?)",
                re.DOTALL,
            )
        return self._pattern

    def _replace(self, match: re.Match) -> str:
        if match.group(1) == "[" and match.group(6) == "]":
            return match.group(0)[1:-1]

        tag = match.group(2)
        attrs = parse_shortcode_attrs(match.group(3))
        content = match.group(5)
        output = self._handlers[tag](attrs, content, tag)
        return match.group(1) + str(output) + match.group(6)
