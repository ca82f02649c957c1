class CurveError(Exception):
    """Base class for every curve editing error."""


class MinimumPointsViolation(CurveError):
    """Removing a point would leave the curve with fewer than two anchors."""

    def __init__(self, count: int):
        super().__init__(f"Cannot remove a point from a curve with {count} points")
        self.count = count


class InvalidSegmentIndex(CurveError, IndexError):
    def __init__(self, index: int, segment_count: int):
        super().__init__(f"Segment index {index} outside [0, {segment_count})")
        self.index = index
        self.segment_count = segment_count


class InvalidPointIndex(CurveError, IndexError):
    def __init__(self, index: int, point_count: int):
        super().__init__(f"Point index {index} outside [0, {point_count})")
        self.index = index
        self.point_count = point_count


class DegenerateGeometry(CurveError, ArithmeticError):
    """A direction was requested from a zero-length vector."""


class InvalidHandleId(CurveError, ValueError):
    def __init__(self, handle_id: str):
        super().__init__(f"Malformed handle id '{handle_id}'")
        self.handle_id = handle_id
