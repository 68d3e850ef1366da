from fastapi import Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter

def rate_limited(times: int, seconds: int):
    """A ``RateLimiter`` dependency that is skipped when redis is not configured."""
    limiter = RateLimiter(times=times, seconds=seconds)

    async def dependency(request: Request, response: Response):
        if FastAPILimiter.redis is not None:
            await limiter(request, response)
    return dependency
