from .fetcher import MetricFetcher

__all__ = ["MetricFetcher"]
