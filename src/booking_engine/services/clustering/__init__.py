"""Geographic clustering helpers."""

from .geo import Cluster, cluster_jobs, is_compact_day, split_located

__all__ = ["Cluster", "cluster_jobs", "is_compact_day", "split_located"]
