"""
Retry helpers for Kubernetes API calls.
"""
from kubernetes_asyncio.client import ApiException

# HTTP status codes that are retryable
RETRYABLE_STATUS_CODES = {
    408,  # Request Timeout
    429,  # Too Many Requests (rate limiting)
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
}


def is_retryable_k8s_error(exception: BaseException) -> bool:
    """
    Determine if a Kubernetes API exception should trigger a retry.

    Args:
        exception: The exception to check

    Returns:
        True if the exception is retryable, False otherwise
    """
    if not isinstance(exception, ApiException):
        # Non-API exceptions are generally not retryable
        return False

    return exception.status in RETRYABLE_STATUS_CODES
