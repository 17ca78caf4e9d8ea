"""Structured field value resolution and emptiness rules."""

import logging
from typing import Any, Iterable, Optional

from .errors import ResolutionFailure
from .models import FieldDescriptor
from .protocol import FieldStorage

logger = logging.getLogger(__name__)


def is_empty_value(value: Any) -> bool:
    """
    Emptiness rule for resolved field values.

    None, "", and empty mappings/sequences are empty. Booleans and numbers
    are never empty, so False, 0 and "0" survive.
    """
    if value is None:
        return True
    if isinstance(value, (bool, int, float)):
        return False
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (dict, list, tuple)):
        return len(value) == 0
    return False


def remove_empty_properties(value: Any) -> Any:
    """Recursively drop empty members from mappings and lists.

    Containers left empty after stripping are dropped by their parent.
    Scalars are returned unchanged.
    """
    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            item = remove_empty_properties(item)
            if not is_empty_value(item):
                cleaned[key] = item
        return cleaned
    if isinstance(value, (list, tuple)):
        cleaned_items = []
        for item in value:
            item = remove_empty_properties(item)
            if not is_empty_value(item):
                cleaned_items.append(item)
        return cleaned_items
    return value


class FieldValueResolver:
    """Resolves a field by name through field storage, dropping layout-only sub-fields."""

    def __init__(self, storage: FieldStorage, excluded_types: Iterable[str]):
        self.storage = storage
        self.excluded_types = frozenset(excluded_types)

    def is_excluded_type(self, field: Optional[FieldDescriptor]) -> bool:
        """Layout-only kinds (accordion, tab, ...) hold no data and are never emitted."""
        return field is not None and field.type in self.excluded_types

    def filter_excluded_sub_fields(self, field: FieldDescriptor) -> FieldDescriptor:
        """Return a copy of field with excluded kinds removed at every depth."""
        update = {}
        if field.sub_fields is not None:
            update["sub_fields"] = [
                self.filter_excluded_sub_fields(sub_field)
                for sub_field in field.sub_fields
                if not self.is_excluded_type(sub_field)
            ]
        if field.layouts is not None:
            update["layouts"] = [self.filter_excluded_sub_fields(layout) for layout in field.layouts]
        if not update:
            return field
        return field.model_copy(update=update)

    def resolve_field(self, selector: str, instance_id: str) -> Any:
        """
        Load and format a field's value for a block instance.

        Args:
            selector: Field name or key
            instance_id: Block instance id

        Returns:
            Formatted value

        Raises:
            ResolutionFailure: If storage has no field for selector
        """
        field = self.storage.get_field(selector, instance_id)
        if field is None:
            raise ResolutionFailure(f"No field '{selector}' for block instance {instance_id}")

        field = self.filter_excluded_sub_fields(field)
        value = self.storage.load_value(instance_id, field)
        return self.storage.format_value(value, instance_id, field)
