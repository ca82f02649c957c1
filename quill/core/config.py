from dataclasses import dataclass


@dataclass(frozen=True)
class Thresholds:
    """
    Interaction tunables. Distances are in screen pixels and are divided by
    the camera zoom before being compared against model-space distances.
    """
    anchor_point: float = 8.0
    anchor_point_hover: float = 10.0
    control_point: float = 8.0
    path_segment: float = 10.0
    segment_anchor_exclusion: float = 12.0
    close_curve: float = 10.0
    corner_point_drag: float = 3.0
    freehand_spacing: float = 6.0
    # fraction of the neighbour distance used for synthesized handles
    smoothing: float = 0.3

    @staticmethod
    def px(value: float, zoom: float) -> float:
        """Convert a screen-pixel distance to model space at the given zoom."""
        if zoom <= 0.0:
            raise ValueError(f"zoom must be positive, got {zoom}")
        return value / zoom


DEFAULT_THRESHOLDS = Thresholds()
