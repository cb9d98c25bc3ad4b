"""Exceptions shared by the pricing and booking domains."""


class DomainError(Exception):
    """Base class for engine errors."""


class BookingValidationError(DomainError, ValueError):
    """
    Input is invalid (inverted stay, past check-in, missing guests).

    Raised before any side effect; validators copy the message verbatim
    into their ``errors`` list.
    """


class PersistenceError(DomainError):
    """
    The persistence collaborator could not be reached.

    Pricing degrades to the last-known-good rate configuration, availability
    and locking fail closed.
    """
