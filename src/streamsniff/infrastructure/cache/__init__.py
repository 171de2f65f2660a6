from .result_cache import InMemoryResultCache, cache_key

__all__ = ["InMemoryResultCache", "cache_key"]
