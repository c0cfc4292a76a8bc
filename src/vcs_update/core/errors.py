from __future__ import annotations


class UpdateError(Exception):
    """Base exception for this project."""


class ConfigError(UpdateError):
    """Raised when configuration is invalid or incomplete."""

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class ValidationError(UpdateError):
    """A provider rejected its options before any round ran."""

    def __init__(self, message: str, *, provider_id: str | None = None):
        super().__init__(message)
        self.provider_id = provider_id


class ProviderOperationError(UpdateError):
    """Error reported by one provider's update call.

    Instances are collected as data; they never abort sibling providers.
    """

    def __init__(
        self,
        messages: str | list[str],
        *,
        provider_id: str | None = None,
        is_warning: bool = False,
    ) -> None:
        self.messages = [messages] if isinstance(messages, str) else list(messages)
        super().__init__("\n".join(self.messages))
        self.provider_id = provider_id
        self.is_warning = is_warning


class InterruptedWithPendingWork(ProviderOperationError):
    """Warning produced when a chain stops while providers still hold continuations."""

    HEADER = "Update operation not completed:"

    def __init__(self, pending_messages: list[str]) -> None:
        super().__init__([self.HEADER, *pending_messages], is_warning=True)
        self.pending_messages = list(pending_messages)


class CancellationSignal(UpdateError):
    """Cooperative cancellation. Never displayed as an error."""


class ChainAlreadyRunning(UpdateError):
    """Raised when a chain is requested while another background operation runs."""
