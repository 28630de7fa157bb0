"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CatalogSourceError(DomainException):
    """Insured-product catalog could not be fetched or read"""

    pass


class HoldingsSourceError(DomainException):
    """External holdings feed returned an error or is unavailable"""

    pass


class InvalidRecordError(DomainException):
    """A single feed record is missing identity fields or is malformed"""

    pass
