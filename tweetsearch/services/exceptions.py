"""Domain-specific exceptions."""


class ServiceError(Exception):
    pass


class UnknownCandidateKind(ServiceError):
    """A selected row is neither the mirror, a text row nor a user row."""


class SessionClosed(ServiceError):
    """An event reached a search session that is not active."""
