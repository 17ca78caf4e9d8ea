"""Exception hierarchy for block parsing."""


class BlockParserError(Exception):
    """Base exception for block parsing errors."""
    pass


class ContractViolation(BlockParserError):
    """Raised when a transformer registration does not satisfy the transformer contract."""
    pass


class NotFoundError(BlockParserError):
    """Raised when a content tree cannot be loaded."""
    pass


class ResolutionFailure(BlockParserError):
    """Raised when an attribute or field value cannot be resolved.

    Transformers treat this as "value absent" and omit the affected key.
    """
    pass


class ConfigurationError(BlockParserError):
    """Raised when configuration is missing or invalid."""
    pass
