from ziria.data.statistics import CacheStatistics

__all__ = ["CacheStatistics"]
