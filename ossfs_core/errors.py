from __future__ import annotations


class OssAdapterError(Exception):
    """Base error for ossfs_core."""


class TransportError(OssAdapterError):
    """Raised when a call into the object-storage client fails."""


class ObjectNotFoundError(OssAdapterError, FileNotFoundError):
    """Raised when the addressed object does not exist."""


class InconsistentStateError(OssAdapterError):
    """Raised when a multi-step operation left the bucket in an unexpected state.

    Examples: a delete that the follow-up existence check does not confirm, or a
    rename whose source could not be removed after a successful copy.
    """
