"""Base class and registry for block transformers."""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Hashable, List, Mapping, Optional

from block_parser.config import ParserConfig
from block_parser.errors import ContractViolation
from block_parser.models import ParsedBlock, RawBlock, TransformResult

if TYPE_CHECKING:
    from block_parser.parser import BlockParser

logger = logging.getLogger(__name__)


def implements_transformer_contract(transformer: Any) -> bool:
    """Whether an object or concrete class provides transform() and get_family()."""
    if inspect.isclass(transformer) and inspect.isabstract(transformer):
        return False
    return callable(getattr(transformer, "transform", None)) and callable(
        getattr(transformer, "get_family", None)
    )


def check_transformer_contract(transformer: Any) -> None:
    """
    Raises:
        ContractViolation: If transformer is abstract or lacks transform() or get_family()
    """
    if not implements_transformer_contract(transformer):
        raise ContractViolation(
            f"{transformer!r} must be concrete and implement transform() and get_family()"
        )


def get_transformer_family(transformer: Any) -> Optional[str]:
    """Family tag declared by a transformer instance, or None when it declares none."""
    try:
        return transformer.get_family()
    except AttributeError:
        return None


class BlockTransformer(ABC):
    """
    Abstract base class for block family transformers.

    Subclasses set ``family`` and implement ``transform``. A transformer
    returns either one ParsedBlock or a list of ParsedBlocks; a list is an
    expansion spliced into the parent's children in place of the block.
    """

    family: ClassVar[str]

    def __init__(self, parser: "BlockParser"):
        self.parser = parser

    @property
    def config(self) -> ParserConfig:
        return self.parser.config

    @abstractmethod
    def transform(self, block: RawBlock, content_id: Hashable) -> TransformResult:
        """
        Normalize one raw block.

        Args:
            block: Raw block to transform
            content_id: Content item the block belongs to

        Returns:
            ParsedBlock, or a list of ParsedBlocks for an expansion
        """
        pass

    @classmethod
    def get_family(cls) -> str:
        return cls.family

    def remove_internal_attributes(self, attrs: Mapping[str, Any]) -> Dict[str, Any]:
        """Copy of attrs without bookkeeping keys (data, name, mode)."""
        internal = set(self.config.internal_attributes)
        return {key: value for key, value in attrs.items() if key not in internal}

    def format_base_block(self, block: RawBlock, attrs: Dict[str, Any]) -> ParsedBlock:
        return ParsedBlock(name=block.name, type=self.get_family(), attrs=attrs)


class TransformerRegistry:
    """Maps a family tag to the transformer handling it."""

    def __init__(self, default_family: str):
        """
        Args:
            default_family: Family used for tags without a registered transformer
        """
        self.default_family = default_family
        self._transformers: Dict[str, BlockTransformer] = {}

    def register(self, family: str, transformer: BlockTransformer) -> None:
        """
        Register a transformer instance, replacing any earlier one for family.

        Raises:
            ContractViolation: If transformer breaks the contract or declares no family
        """
        check_transformer_contract(transformer)
        if not family or not get_transformer_family(transformer):
            raise ContractViolation(f"{transformer!r} has no family tag")

        self._transformers[family] = transformer
        logger.debug(f"Registered block transformer: {family}")

    def get(self, family: str) -> BlockTransformer:
        """
        Transformer for family, falling back to the default family.

        Raises:
            ContractViolation: If neither family nor the default is registered
        """
        transformer = self._transformers.get(family) or self._transformers.get(self.default_family)
        if transformer is None:
            raise ContractViolation(
                f"No transformer registered for '{family}' and no '{self.default_family}' fallback"
            )
        return transformer

    def families(self) -> List[str]:
        return list(self._transformers.keys())

    def __contains__(self, family: str) -> bool:
        return family in self._transformers
