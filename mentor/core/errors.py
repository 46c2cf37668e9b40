"""Exception taxonomy for the assistant engine.

Backend and parse failures are caught at the boundary and mapped to safe
defaults; only caller-side validation and state errors reach the caller.
"""


class MentorError(Exception):
    """Base class for all assistant engine errors."""


class BackendError(MentorError):
    """An upstream LLM call failed (network, auth, SDK, empty response)."""


class EmptyInputError(MentorError, ValueError):
    """User input was empty or whitespace-only. Raised before any backend call."""


class InvalidStateError(MentorError):
    """Operation attempted on a session that cannot accept it."""


class SessionBusyError(InvalidStateError):
    """A turn is already in flight on this session."""


class ParseError(MentorError, ValueError):
    """Backend returned a payload that is not valid structured data."""


class UnsupportedFormatError(MentorError, ValueError):
    """File extraction was asked to handle an unrecognized format."""
