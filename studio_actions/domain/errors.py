"""Action pipeline error taxonomy."""


class ActionError(Exception):
    """Base class for errors raised while running a single action."""


class ValidationError(ActionError):
    """A required payload field is missing or empty."""


class QueryRejected(ActionError):
    """Query text failed the read-only query guard."""


class StoreError(ActionError):
    """The document store rejected or failed a call."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


class UnknownActionType(ActionError):
    """Action type has no registered handler."""

    def __init__(self, action_type: str):
        super().__init__(f"Unknown action type: {action_type}")
        self.action_type = action_type


class InvalidTransition(ActionError):
    """Attempted to move an action to a status it cannot reach."""
