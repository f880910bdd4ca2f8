from fastapi import Request

from marketplace.services.rate_limiter import RateLimiter


def get_rate_limiter(request: Request) -> RateLimiter:
    """The limiter lives on the app object for the lifetime of the process."""
    return request.app.state.rate_limiter
