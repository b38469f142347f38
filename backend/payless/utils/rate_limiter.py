"""
Simple Memory-based Rate Limiter for outbound SMS endpoints.
Counts are per operator session (falling back to client IP) and per process.
"""
import time
from fastapi import Request, HTTPException
from typing import Dict, Tuple

# In-memory storage: {key: (window_start, count)}
_rate_limit_store: Dict[str, Tuple[float, int]] = {}


def reset_rate_limits() -> None:
    _rate_limit_store.clear()


def rate_limit(requests: int, window: int):
    """
    Dependency for rate limiting.
    Example: Depends(rate_limit(requests=5, window=60))
    """
    def limiter(request: Request):
        key = request.headers.get("session-id") or (request.client.host if request.client else "unknown")
        key = f"{request.url.path}:{key}"
        now = time.time()

        if key not in _rate_limit_store:
            _rate_limit_store[key] = (now, 1)
            return True

        window_start, count = _rate_limit_store[key]

        # Reset window if expired
        if now - window_start > window:
            _rate_limit_store[key] = (now, 1)
            return True

        if count >= requests:
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded. Try again in {int(window - (now - window_start))} seconds."
            )

        _rate_limit_store[key] = (window_start, count + 1)
        return True

    return limiter
