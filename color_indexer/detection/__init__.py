"""Color token detection."""

from .detector import TokenDetector, merge_by_range

__all__ = ["TokenDetector", "merge_by_range"]
