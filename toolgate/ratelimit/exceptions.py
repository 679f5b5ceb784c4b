"""Rate limit exceptions."""

from toolgate.edge.exceptions import EdgeRejection


class RateLimitExceededError(EdgeRejection):
    """Raised when a client exceeds its request window.

    Attributes:
        limit: The rate limit that was exceeded.
        retry_after: Seconds until request can be retried.
    """

    status_code = 429

    def __init__(self, limit: int, retry_after: float):
        super().__init__(
            message="Rate limit exceeded. Try again later.",
            code="RATE_LIMIT_EXCEEDED",
        )
        self.limit = limit
        self.retry_after = retry_after
