"""Floor plan fusion package for labeling and dimensioning detected rooms."""

from .analyzer import FloorPlanAnalyzer
from .models import AnalysisResult, FurnitureItem, PipelineParams, Room, RoomType

__version__ = "0.1.0"
__all__ = [
    "FloorPlanAnalyzer",
    "AnalysisResult",
    "FurnitureItem",
    "PipelineParams",
    "Room",
    "RoomType",
]
