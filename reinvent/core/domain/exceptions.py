# reinvent/core/domain/exceptions.py
from typing import List, Optional


class DomainError(Exception):
    """Base class for all domain-level exceptions."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

# --- Input Errors ---

class ValidationError(DomainError):
    """Raised when a request is missing a field, is empty, or exceeds a length bound."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

class ModerationRejected(DomainError):
    """Raised when input matches a disallowed keyword or is flagged by the moderation service."""
    def __init__(self, message: str = "Content flagged by moderation system"):
        super().__init__(message)

class ModerationUnavailableError(DomainError):
    """Raised when moderation is configured fail-closed and the moderation service is unreachable."""
    def __init__(self, reason: str):
        super().__init__(f"Moderation service unavailable: {reason}")

# --- Provider Errors ---

class ProviderError(DomainError):
    """
    Base class for failures of a single AI backend.
    The fallback orchestrator treats every subclass as "try the next provider".
    """
    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"[{provider}] {message}")

    @property
    def summary(self) -> str:
        """Short, client-safe description: error class and provider only."""
        return f"{type(self).__name__} from {self.provider}"

class ConfigurationError(ProviderError):
    """Raised when a provider's credential is absent."""

class UpstreamError(ProviderError):
    """Raised when the remote call completed but the provider rejected it or returned garbage."""
    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(provider, message)

    @property
    def summary(self) -> str:
        base = super().summary
        if self.status_code is not None:
            return f"{base} (HTTP {self.status_code})"
        return base

class TransportError(ProviderError):
    """Raised on network-level failures: timeout, DNS, connection reset, cancellation."""

class AllProvidersFailedError(DomainError):
    """Raised when every provider in a fallback list failed; wraps the last recorded error."""
    def __init__(self, operation: str, last_error: Optional[ProviderError], attempts: Optional[List[str]] = None):
        self.operation = operation
        self.last_error = last_error
        self.attempts = list(attempts or [])
        reason = str(last_error) if last_error else "no providers configured"
        super().__init__(f"All providers failed for '{operation}': {reason}")

    @property
    def detail(self) -> str:
        if self.last_error is None:
            return "No providers configured"
        return self.last_error.summary
