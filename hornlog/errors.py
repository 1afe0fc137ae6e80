"""
Error types for hornlog

Every failure the engine reports is a LogicError. The subclasses only
narrow down where it came from, so callers can catch LogicError alone.
"No solution" is never an error: it is an empty result list.
"""

from typing import Optional


class LogicError(Exception):
    """Base exception for logic engine operations"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(LogicError):
    """Malformed fact, rule or query text"""

    def __init__(self, message: str, text: Optional[str] = None,
                 position: Optional[int] = None):
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)
        self.text = text
        self.position = position


class DepthExceededError(LogicError):
    """Search recursion went past the configured maximum depth"""

    def __init__(self, depth: int, limit: int):
        super().__init__(f"Maximum search depth exceeded ({depth} > {limit})")
        self.depth = depth
        self.limit = limit


class ValidationError(LogicError):
    """A clause failed the safety / arity checks in strict mode"""


class FeatureDisabledError(LogicError):
    """Logic programming was disabled in the runtime configuration"""

    def __init__(self, feature: str = "Logic programming"):
        super().__init__(f"{feature} is disabled")
        self.feature = feature
