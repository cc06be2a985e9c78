from .base import KEY_PATTERN, ConfigValidator
from .protocol import ValidatorProtocol

__all__ = ["ConfigValidator", "KEY_PATTERN", "ValidatorProtocol"]
