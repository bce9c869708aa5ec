from ziria.managers.cache_store import CacheStore
from ziria.managers.rate_limiter import limiter, rate_limit_exceeded_handler

__all__ = ["CacheStore", "limiter", "rate_limit_exceeded_handler"]
