"""Exception hierarchy for file state reconciliation.

Every error is scoped to the smallest unit that caused it: a single
state of a single resource. The reconciler converts these into failed
results and keeps going with sibling states and resources.
"""


class FileStateError(Exception):
    """Base exception for all reconciliation errors."""


class ValidationError(FileStateError):
    """Raised when a desired value is malformed or cannot be resolved."""


class UnsupportedSchemeError(ValidationError):
    """Raised when a source URI uses a scheme no transport handles."""


class PrivilegeError(FileStateError):
    """Raised when an attribute needs privileges the process does not have."""


class NotFoundError(FileStateError):
    """Raised when a path required by an operation does not exist."""


class IntegrityError(FileStateError):
    """Raised when a rollback would destroy content modified after creation."""


class TransportError(FileStateError):
    """Raised when a source transport cannot describe, list or retrieve."""


class FileIOError(FileStateError):
    """Raised when a filesystem mutation fails.

    The underlying OSError is chained as ``__cause__`` and its message is
    appended to this error's message.
    """


class DevError(FileStateError):
    """Raised on an internal-consistency violation (a logic defect)."""
