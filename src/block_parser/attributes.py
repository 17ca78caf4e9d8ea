"""Infer block attribute values from saved markup.

Implements the editor's attribute source rules against a block's inner
HTML. A rule that cannot produce a value returns None, which callers
treat as "leave the attribute absent".
"""

import logging
from typing import Any, Callable, Hashable, Optional, Union

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from .errors import ResolutionFailure
from .models import AttributeSchema

logger = logging.getLogger(__name__)

MetaLookup = Callable[[Hashable, str], Any]

Scope = Union[BeautifulSoup, Tag]


class AttributeResolver:
    """Resolves one AttributeSchema against a markup fragment."""

    def __init__(self, meta_lookup: Optional[MetaLookup] = None):
        """
        Args:
            meta_lookup: Optional (content_id, meta_key) -> value callable
                backing the "meta" source
        """
        self.meta_lookup = meta_lookup

    def resolve(self, schema: AttributeSchema, markup: str, content_id: Hashable) -> Any:
        """
        Derive an attribute value from markup.

        Args:
            schema: Attribute declaration
            markup: Block inner HTML
            content_id: Content item being parsed

        Returns:
            The sourced value, the declared default when the source yields
            nothing, or None

        Raises:
            ResolutionFailure: If the declared selector is invalid
        """
        value = self._from_source(schema, markup, content_id)
        if value is None and schema.has_default:
            return schema.default
        return value

    def _from_source(self, schema: AttributeSchema, markup: str, content_id: Hashable) -> Any:
        source = schema.source
        if source is None:
            return None
        if source == "raw":
            return markup or None
        if source == "meta":
            if self.meta_lookup is None or not schema.meta:
                return None
            return self.meta_lookup(content_id, schema.meta)
        if not markup:
            return None

        soup = BeautifulSoup(markup, "html.parser")
        try:
            return self._from_scope(schema, soup)
        except SelectorSyntaxError as e:
            raise ResolutionFailure(f"Invalid selector {schema.selector!r}: {e}") from e

    def _from_scope(self, schema: AttributeSchema, scope: Scope) -> Any:
        source = schema.source

        if source == "attribute":
            if not schema.attribute:
                return None
            element = self._select_element(scope, schema.selector)
            if element is None:
                return None
            if _is_type(schema, "boolean"):
                return element.has_attr(schema.attribute)
            value = element.get(schema.attribute)
            if value is None:
                return None
            if isinstance(value, list):
                value = " ".join(value)
            return _coerce(schema, value)

        if source in ("html", "rich-text"):
            element = scope.select_one(schema.selector) if schema.selector else scope
            if element is None:
                return None
            return element.decode_contents()

        if source == "text":
            element = scope.select_one(schema.selector) if schema.selector else scope
            if element is None:
                return None
            return _coerce(schema, element.get_text())

        if source == "query":
            if not schema.selector or not schema.query:
                return None
            return [self._query_item(schema.query, element) for element in scope.select(schema.selector)]

        logger.debug(f"Unsupported attribute source: {source}")
        return None

    def _query_item(self, query: dict, element: Tag) -> dict:
        item = {}
        for key, sub_schema in query.items():
            value = self._from_scope(sub_schema, element)
            if value is None and sub_schema.has_default:
                value = sub_schema.default
            item[key] = value
        return item

    @staticmethod
    def _select_element(scope: Scope, selector: Optional[str]) -> Optional[Tag]:
        if selector:
            return scope.select_one(selector)
        if isinstance(scope, BeautifulSoup):
            return scope.find(True)
        return scope


def _is_type(schema: AttributeSchema, name: str) -> bool:
    if isinstance(schema.type, list):
        return name in schema.type
    return schema.type == name


def _coerce(schema: AttributeSchema, value: str) -> Any:
    """Coerce sourced text to a declared numeric type; other types pass through."""
    try:
        if _is_type(schema, "integer"):
            return int(value.strip())
        if _is_type(schema, "number"):
            number = float(value.strip())
            return int(number) if number.is_integer() else number
    except ValueError:
        logger.debug(f"Could not coerce {value!r} to {schema.type}")
        return None
    return value
