"""Scan orchestration: scheduling, ranking and progress."""

from warpscan.services.progress import ProgressTracker
from warpscan.services.ranker import rank, top
from warpscan.services.scheduler import ProbeScheduler

__all__ = ["ProbeScheduler", "ProgressTracker", "rank", "top"]
