"""Data models for raw and normalized block trees.

RawBlock is the parser input (one entry of a parsed content tree),
ParsedBlock is the JSON-serializable output unit. Schema-side models
(AttributeSchema, FieldDescriptor) are pydantic so they can be loaded
from YAML/JSON fixtures supplied by a host.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class BlockFamily(str, Enum):
    """Transformer families a block can be dispatched to."""

    GENERIC = "generic"
    SCHEMA_FIELD = "schemaField"


@dataclass(frozen=True)
class RawBlock:
    """One node of a parsed content tree."""

    name: Optional[str]
    attrs: Mapping[str, Any] = field(default_factory=dict)
    inner_html: str = ""
    inner_blocks: Tuple["RawBlock", ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawBlock":
        """Build a RawBlock from a parse-tree dict.

        Accepts both the editor's camelCase keys (blockName, innerHTML,
        innerBlocks) and the snake_case field names.
        """
        name = data.get("blockName", data.get("name"))
        inner_html = data.get("innerHTML", data.get("inner_html")) or ""
        children = data.get("innerBlocks", data.get("inner_blocks")) or []
        return cls(
            name=name,
            attrs=dict(data.get("attrs") or {}),
            inner_html=inner_html,
            inner_blocks=tuple(cls.from_dict(child) for child in children),
        )

    @classmethod
    def root(cls, blocks: List["RawBlock"]) -> "RawBlock":
        """Wrap top-level blocks in an unnamed document root."""
        return cls(name=None, inner_blocks=tuple(blocks))


@dataclass
class ParsedBlock:
    """Normalized output block."""

    name: str
    type: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    inner_blocks: Optional[List["ParsedBlock"]] = None
    rendered: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dict, omitting unset optional members."""
        result: Dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "attrs": self.attrs,
        }
        if self.data is not None:
            result["data"] = self.data
        if self.inner_blocks is not None:
            result["innerBlocks"] = [block.to_dict() for block in self.inner_blocks]
        if self.rendered is not None:
            result["rendered"] = self.rendered
        return result


# A transformer returns either a single block or an expansion into siblings.
TransformResult = Union[ParsedBlock, List[ParsedBlock]]


class AttributeSchema(BaseModel):
    """Declaration of one block attribute and how to source it from markup.

    Attributes:
        type: Declared value type (string, boolean, number, integer, array, object)
        default: Value used when the source yields nothing
        source: Source rule (attribute, html, rich-text, text, query, raw, meta)
        selector: CSS selector of the element to read from
        attribute: HTML attribute name for the "attribute" source
        query: Sub-schema applied per matched element for the "query" source
        meta: Meta key for the "meta" source
    """

    model_config = ConfigDict(extra="allow")

    type: Optional[Union[str, List[str]]] = None
    default: Any = None
    source: Optional[str] = None
    selector: Optional[str] = None
    attribute: Optional[str] = None
    query: Optional[Dict[str, "AttributeSchema"]] = None
    meta: Optional[str] = None

    @property
    def has_default(self) -> bool:
        """True when a default was declared, including an explicit null."""
        return "default" in self.model_fields_set


class BlockTypeSchema(BaseModel):
    """Registered block type: attribute declarations plus feature supports."""

    model_config = ConfigDict(extra="allow")

    attributes: Dict[str, AttributeSchema] = Field(default_factory=dict)
    supports: Dict[str, Any] = Field(default_factory=dict)

    def supports_anchor(self) -> bool:
        return bool(self.supports.get("anchor"))


class FieldDescriptor(BaseModel):
    """Identity and hierarchy metadata for one structured field.

    Attributes:
        id: Storage id of the field definition
        key: Field-reference token (e.g. field_5f1a...)
        name: Field name used as the data key
        type: Field kind (text, repeater, image, tab, ...)
        parent: Id or key of the parent field or field group
        sub_fields: Nested field definitions for composite kinds
        layouts: Flexible content layouts, each carrying its own sub_fields
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    key: str = ""
    name: str = ""
    type: str = ""
    parent: Optional[Union[int, str]] = None
    sub_fields: Optional[List["FieldDescriptor"]] = None
    layouts: Optional[List["FieldDescriptor"]] = None


@dataclass(frozen=True)
class FieldHookMeta:
    """Classification metadata passed to field hooks."""

    type: str
    name: str
    block_name: str
    family: str = BlockFamily.SCHEMA_FIELD.value

