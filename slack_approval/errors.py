"""Exceptions raised by the approval gate."""


class SlackApprovalError(Exception):
    """Base class for approval gate failures."""

    pass


class ConfigurationError(SlackApprovalError):
    """Raised when required settings are missing."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Configuration errors: " + "; ".join(errors))


class BlockParseError(SlackApprovalError):
    """Raised when custom blocks input is not a valid Block Kit array."""

    pass


class MessageDeliveryError(SlackApprovalError):
    """Raised when the approval request message cannot be posted."""

    def __init__(self, channel_id: str, reason: str):
        self.channel_id = channel_id
        self.reason = reason
        super().__init__(f"Failed to post approval request to {channel_id}: {reason}")


class InvalidActionEvent(SlackApprovalError):
    """Raised when an action payload lacks the fields needed to resolve it."""

    pass


class ListenerConnectionError(SlackApprovalError):
    """Raised when the Socket Mode connection cannot be opened."""

    pass
