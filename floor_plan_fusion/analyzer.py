"""Main floor plan fusion pipeline."""

import logging
from typing import Iterable, List, Optional, Union

from .area_calculation import (
    calculate_total_area,
    calculate_total_ocr_area,
    count_rooms_by_type,
    generate_area_report,
)
from .dimension_extraction import apply_ocr_dimensions, extract_dimensions_from_tokens
from .furniture import assign_furniture_to_rooms, group_furniture_by_room, process_furniture_items
from .fusion import reclassify_rooms
from .models import (
    AnalysisResult,
    DetectionResponse,
    ImageSize,
    PipelineParams,
    RawDetection,
    TextToken,
)
from .room_classification import classify_rooms

logger = logging.getLogger(__name__)

Detections = Union[DetectionResponse, Iterable[RawDetection]]


def _predictions(detections: Optional[Detections]) -> List[RawDetection]:
    if detections is None:
        return []
    if isinstance(detections, DetectionResponse):
        return detections.predictions
    return list(detections)


class FloorPlanAnalyzer:
    """Turn room, furniture and text detections into a labeled floor plan."""

    def __init__(self, params: Optional[PipelineParams] = None):
        """Initialize the analyzer.

        Args:
            params: Pipeline parameters
        """
        self.params = params or PipelineParams()

    def analyze(
        self,
        room_detections: Detections,
        furniture_detections: Optional[Detections] = None,
        text_tokens: Optional[Iterable[TextToken]] = None,
        scale_factor: Optional[float] = None,
        image: Optional[ImageSize] = None,
    ) -> AnalysisResult:
        """Analyze the detections of one floor plan image.

        Args:
            room_detections: Room detections or the detection response
            furniture_detections: Furniture detections or the detection response
            text_tokens: OCR text tokens; the OCR stage is skipped when None
            scale_factor: Physical length per pixel, overrides the parameters
            image: Size of the analysed image

        Returns:
            AnalysisResult with enriched rooms and furniture

        Raises:
            ValueError: If the scale factor is not positive
        """
        scale = self.params.scale_factor if scale_factor is None else scale_factor
        if scale <= 0:
            raise ValueError(f"Scale factor must be positive, got {scale}")

        if image is None and isinstance(room_detections, DetectionResponse):
            image = room_detections.image

        # Step 1: Classify rooms by label, size and shape
        rooms = classify_rooms(_predictions(room_detections), scale, self.params.classifier)
        logger.info("Classified %d rooms", len(rooms))

        # Step 2: Link furniture to rooms
        furniture = process_furniture_items(_predictions(furniture_detections))
        furniture = assign_furniture_to_rooms(furniture, rooms)
        assigned = sum(1 for item in furniture if item.assigned_room_id is not None)
        logger.info("Assigned %d of %d furniture items to rooms", assigned, len(furniture))

        # Step 3: Refine unresolved rooms with furniture evidence
        rooms = reclassify_rooms(rooms, group_furniture_by_room(furniture), self.params.fusion)
        logger.info(
            "Room types: %s",
            ", ".join(f"{t.value}={n}" for t, n in count_rooms_by_type(rooms).items()),
        )

        # Step 4: Overlay OCR dimensions
        dimensions = []
        if text_tokens is not None:
            dimension_params = self.params.dimensions
            dimensions = extract_dimensions_from_tokens(text_tokens, dimension_params)
            rooms = apply_ocr_dimensions(rooms, dimensions, dimension_params.room_tolerance_px)
            verified = sum(1 for r in rooms if r.ocr_dimensions and r.ocr_dimensions.verified)
            logger.info(
                "Read %d dimensions, %d rooms verified by OCR", len(dimensions), verified
            )

        total_area = calculate_total_area(rooms)
        logger.info("Total area: %.2f", total_area)

        return AnalysisResult(
            rooms=rooms,
            furniture=furniture,
            dimensions=dimensions,
            scale_factor=scale,
            total_area_phys=total_area,
            total_ocr_area_m2=calculate_total_ocr_area(rooms),
            image=image,
        )

    def print_report(self, result: AnalysisResult) -> None:
        """Print a formatted report of the analysis.

        Args:
            result: Analysis result
        """
        report = generate_area_report(result.rooms, result.total_area_phys)
        print("\n" + report)
