"""Prebuilt recipes for containerised tools."""

from .base import Tool
from .totalsegmentator import RESULT_FILES, TotalSegmentatorConfig, TotalSegmentatorTool

__all__ = [
    "Tool",
    "TotalSegmentatorConfig",
    "TotalSegmentatorTool",
    "RESULT_FILES",
]
