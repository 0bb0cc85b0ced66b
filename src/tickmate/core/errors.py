"""Error taxonomy shared by the core, the adapter and the transports."""


class TickmateError(Exception):
    """Base error. `kind` tells the caller which failure class it is."""

    kind = "error"

    def to_dict(self) -> dict:
        return {"error": str(self), "kind": self.kind}


class DataIntegrityError(TickmateError):
    """Raised when fetched task data is inconsistent or malformed."""

    kind = "data_integrity"


class ValidationError(TickmateError):
    """Raised when a caller supplies a missing or malformed argument."""

    kind = "validation"


class DateParseError(ValidationError):
    """Raised when a flexible date expression cannot be understood."""

    def __init__(self, text: str):
        super().__init__(f"Unable to parse date: {text}")
        self.input = text


class NotFoundError(TickmateError):
    """Raised when a referenced task or project does not exist."""

    kind = "not_found"
