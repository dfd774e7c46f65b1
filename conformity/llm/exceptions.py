class LlmError(Exception):
    """Raised when a semantic classification call fails."""


class LlmNetworkError(LlmError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class LlmResponseError(LlmError):
    """Raised when the AI provider reply is empty or cannot be parsed."""
