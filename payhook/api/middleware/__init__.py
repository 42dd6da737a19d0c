from payhook.api.middleware.rate_limit import RateLimitMiddleware

__all__ = ["RateLimitMiddleware"]
