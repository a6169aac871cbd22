"""Errors raised by third-party API clients."""


class IntegrationError(Exception):
    """Base class for failures talking to an external service."""


class RateSourceError(IntegrationError):
    """The exchange rate could not be fetched or parsed."""


class LedgerQueryError(IntegrationError):
    """The ledger API returned an error or an unreadable payload."""


class CallbackDeliveryError(IntegrationError):
    """The merchant callback request failed."""
