"""Domain-specific exceptions"""


class BankAdvisorError(Exception):
    """Base exception for the advisor"""

    pass


class InvalidArgumentError(BankAdvisorError, ValueError):
    """Caller passed an amount or term the recommendation contract rejects"""

    pass


class ModelStoreError(BankAdvisorError):
    """Model artifact could not be written or read"""

    pass
