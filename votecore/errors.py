"""Structured failures raised by the election core."""


class ElectionError(Exception):
    """Base class for every failure the election core reports to callers.

    Each subclass carries a ``kind`` name so an outer layer can translate
    the failure (HTTP status, UI message) without matching on classes.
    """
    kind = "ElectionError"

    def to_dict(self) -> dict[str, str]:
        return {"error": str(self), "kind": self.kind}


class InvalidArgument(ElectionError, ValueError):
    """Malformed input; the caller can retry with corrected arguments."""
    kind = "InvalidArgument"


class NotAuthorized(ElectionError):
    """The caller lacks the privilege the operation requires."""
    kind = "NotAuthorized"


class InvalidState(ElectionError):
    """The operation is not permitted in the current election phase."""
    kind = "InvalidState"


class NotFound(ElectionError, LookupError):
    """A referenced party or voter does not exist."""
    kind = "NotFound"


class Conflict(ElectionError):
    """The operation would break a uniqueness invariant (e.g. a second vote)."""
    kind = "Conflict"


ERROR_KINDS: dict[str, type[ElectionError]] = {
    cls.kind: cls
    for cls in (InvalidArgument, NotAuthorized, InvalidState, NotFound, Conflict)
}
