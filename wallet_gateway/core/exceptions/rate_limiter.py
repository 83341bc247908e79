from wallet_gateway.core.exceptions.base import CustomException


class RateLimiterException(CustomException):
    """
    Base exception for Rate Limiter
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message, exception)


class RateLimitConfigurationError(RateLimiterException):
    """
    Invalid bucket capacity, fill rate or token amount
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message, exception)


class RateLimitBucketRetiredError(RateLimiterException):
    """
    The bucket was pruned from its registry; fetch the key's bucket again
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message, exception)
