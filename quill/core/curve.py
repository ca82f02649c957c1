import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Iterator, Sequence

from .errors import InvalidPointIndex, InvalidSegmentIndex, MinimumPointsViolation
from .math import Op, Point, SegmentKind, iter_segments, quadratic_control, segment_kind, synthesize_handles

logger = logging.getLogger(__name__)


def _shift(p: Point | None, dx: float, dy: float) -> Point | None:
    if p is None:
        return None
    return p[0] + dx, p[1] + dy


def _as_point(value) -> Point | None:
    if value is None:
        return None
    return float(value[0]), float(value[1])


def new_curve_id() -> str:
    return f"curve:{uuid.uuid4().hex}"


@dataclass(frozen=True)
class CurvePoint:
    """
    An anchor plus its optional control handles:
      - incoming: shapes the segment arriving at this anchor
      - outgoing: shapes the segment leaving this anchor
    A missing handle means a straight line on that side.
    """
    position: Point
    incoming: Point | None = None
    outgoing: Point | None = None

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    @property
    def is_corner(self) -> bool:
        return self.incoming is None and self.outgoing is None

    def coords(self) -> Iterator[Point]:
        yield self.position
        if self.incoming is not None:
            yield self.incoming
        if self.outgoing is not None:
            yield self.outgoing

    def translated(self, dx: float, dy: float) -> "CurvePoint":
        return CurvePoint(
            position=(self.x + dx, self.y + dy),
            incoming=_shift(self.incoming, dx, dy),
            outgoing=_shift(self.outgoing, dx, dy),
        )

    def with_handles(self, incoming: Point | None, outgoing: Point | None) -> "CurvePoint":
        return CurvePoint(self.position, incoming, outgoing)

    def as_corner(self) -> "CurvePoint":
        return CurvePoint(self.position)

    def to_dict(self) -> dict:
        data: dict = {"x": self.x, "y": self.y}
        if self.incoming is not None:
            data["in"] = list(self.incoming)
        if self.outgoing is not None:
            data["out"] = list(self.outgoing)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CurvePoint":
        return cls(
            position=(float(data["x"]), float(data["y"])),
            incoming=_as_point(data.get("in")),
            outgoing=_as_point(data.get("out")),
        )


@dataclass(frozen=True)
class Curve:
    """
    A committed or in-progress Bezier shape as the host stores it.

      - x, y: page position of the bounding-box origin
      - points: anchors in path order, local to (x, y)
      - is_closed: adds an implicit last -> first segment
      - w, h: bounding box of anchors and handles, never below 1
      - edit_mode: whether the editing machine may hit-test this curve
      - hover_point / hover_segment_index: transient insertion preview
    """
    id: str = field(default_factory=new_curve_id)
    x: float = 0.0
    y: float = 0.0
    points: tuple[CurvePoint, ...] = ()
    is_closed: bool = False
    w: float = 1.0
    h: float = 1.0
    edit_mode: bool = False
    hover_point: Point | None = None
    hover_segment_index: int | None = None
    color: str = "#000000"
    stroke_width: float = 2.0
    fill: bool = False

    # ---- structure ----------------------------------------------------------
    @property
    def segment_count(self) -> int:
        n = len(self.points)
        if n < 2:
            return 0
        return n if (self.is_closed and n > 2) else n - 1

    def segment(self, index: int) -> tuple[CurvePoint, CurvePoint]:
        if not 0 <= index < self.segment_count:
            raise InvalidSegmentIndex(index, self.segment_count)
        n = len(self.points)
        return self.points[index], self.points[(index + 1) % n]

    # ---- coordinates --------------------------------------------------------
    def page_points(self) -> tuple[CurvePoint, ...]:
        return tuple(p.translated(self.x, self.y) for p in self.points)

    def to_local(self, page_point: Point) -> Point:
        return page_point[0] - self.x, page_point[1] - self.y

    def page_bounds(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.w, self.h

    def clear_hover(self) -> "Curve":
        if self.hover_point is None and self.hover_segment_index is None:
            return self
        return replace(self, hover_point=None, hover_segment_index=None)

    # ---- serialization ------------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "points": [p.to_dict() for p in self.points],
            "closed": bool(self.is_closed),
            "w": self.w,
            "h": self.h,
            "edit_mode": bool(self.edit_mode),
            "style": {"color": self.color, "stroke_width": self.stroke_width, "fill": self.fill},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Curve":
        style = dict(data.get("style", {}))
        curve = cls(
            id=data.get("id") or new_curve_id(),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            points=tuple(CurvePoint.from_dict(p) for p in data.get("points", [])),
            is_closed=bool(data.get("closed", False)),
            edit_mode=bool(data.get("edit_mode", False)),
            color=style.get("color", "#000000"),
            stroke_width=float(style.get("stroke_width", 2.0)),
            fill=bool(style.get("fill", False)),
        )
        # w/h are derived; never trust the stored values
        return normalize(curve)


# ---- path serialization -----------------------------------------------------
def _segment_op(p1: CurvePoint, p2: CurvePoint) -> Op:
    match segment_kind(p1, p2):
        case SegmentKind.CUBIC:
            return "C", (p1.outgoing, p2.incoming, p2.position)
        case SegmentKind.QUADRATIC:
            return "Q", (quadratic_control(p1, p2), p2.position)
        case SegmentKind.LINE:
            return "L", p2.position


def to_path(curve: Curve) -> list[Op]:
    """
    Convert a curve to drawing ops:
      - ("M", (x,y))           moveTo
      - ("L", (x,y))           lineTo
      - ("Q", (c,p2))          quadTo
      - ("C", (c1,c2,p2))      cubicTo
      - ("Z", ())              closePath
    The closing segment of a closed curve is emitted with the same rule as
    every other segment before the close op.
    """
    pts = curve.points
    if not pts:
        return []
    ops: list[Op] = [("M", pts[0].position)]
    for _, p1, p2 in iter_segments(pts, curve.is_closed):
        ops.append(_segment_op(p1, p2))
    if curve.is_closed and len(pts) > 2:
        ops.append(("Z", ()))
    return ops


def _fmt(v: float) -> str:
    return f"{v:.6g}"


def to_svg_path(ops: Sequence[Op]) -> str:
    parts: list[str] = []
    for op, data in ops:
        match op:
            case "M" | "L":
                parts.append(f"{op} {_fmt(data[0])} {_fmt(data[1])}")
            case "Q" | "C":
                coords = " ".join(f"{_fmt(px)} {_fmt(py)}" for px, py in data)
                parts.append(f"{op} {coords}")
            case "Z":
                parts.append("Z")
            case _:
                raise ValueError(f"Unknown path op '{op}'")
    return " ".join(parts)


# ---- bounds / normalization -------------------------------------------------
def recompute_bounds(points: Sequence[CurvePoint]) -> tuple[float, float, float, float]:
    """
    (min_x, min_y, w, h) over every anchor and every present handle. Handles
    can stick out of the anchor hull so they are always included. w and h are
    floored at 1.
    """
    xs: list[float] = []
    ys: list[float] = []
    for p in points:
        for cx, cy in p.coords():
            xs.append(cx)
            ys.append(cy)
    if not xs:
        return 0.0, 0.0, 1.0, 1.0
    min_x = min(xs)
    min_y = min(ys)
    return min_x, min_y, max(1.0, max(xs) - min_x), max(1.0, max(ys) - min_y)


def normalize(curve: Curve) -> Curve:
    """
    Move the box origin onto the top-left of the bounds: local coordinates
    become non-negative and minimal, (x, y) absorbs the translation.
    """
    min_x, min_y, w, h = recompute_bounds(curve.points)
    if min_x == 0.0 and min_y == 0.0:
        return replace(curve, w=w, h=h)
    return replace(
        curve,
        x=curve.x + min_x,
        y=curve.y + min_y,
        w=w,
        h=h,
        points=tuple(p.translated(-min_x, -min_y) for p in curve.points),
        hover_point=_shift(curve.hover_point, -min_x, -min_y),
    )


def replace_points(curve: Curve, points: Sequence[CurvePoint], **changes) -> Curve:
    return normalize(replace(curve, points=tuple(points), **changes))


# ---- structural edits -------------------------------------------------------
def insert_point(curve: Curve, segment_index: int, new_point: CurvePoint) -> Curve:
    """
    Splice `new_point` right after `segment_index`. Neighbouring handles are
    left untouched.
    """
    count = curve.segment_count
    if not 0 <= segment_index < count:
        if __debug__:
            raise InvalidSegmentIndex(segment_index, count)
        logger.warning("Ignoring insertion at segment %d of %d", segment_index, count)
        return curve
    pts = list(curve.points)
    pts.insert(segment_index + 1, new_point)
    logger.debug("Inserted point after segment %d of %s", segment_index, curve.id)
    return replace_points(curve, pts)


def remove_point(curve: Curve, index: int) -> Curve:
    """
    Remove one anchor. Curves never drop below two points; a closed curve
    left with fewer than three points reopens.
    """
    n = len(curve.points)
    if n <= 2:
        raise MinimumPointsViolation(n)
    if not 0 <= index < n:
        raise InvalidPointIndex(index, n)
    pts = list(curve.points)
    pts.pop(index)
    closed = curve.is_closed and len(pts) >= 3
    logger.debug("Removed point %d of %s", index, curve.id)
    return replace_points(curve, pts, is_closed=closed)


def move_point(curve: Curve, index: int, position: Point) -> Curve:
    """Move an anchor; its own handles travel with it."""
    n = len(curve.points)
    if not 0 <= index < n:
        raise InvalidPointIndex(index, n)
    p = curve.points[index]
    dx = position[0] - p.x
    dy = position[1] - p.y
    pts = list(curve.points)
    pts[index] = p.translated(dx, dy)
    return replace_points(curve, pts)


def toggle_point_type(curve: Curve, index: int, smoothing: float) -> Curve:
    """
    Corner -> smooth (handles synthesized from the neighbours) or
    smooth -> corner (handles dropped).
    """
    n = len(curve.points)
    if not 0 <= index < n:
        raise InvalidPointIndex(index, n)
    pts = list(curve.points)
    p = pts[index]
    if not p.is_corner:
        pts[index] = p.as_corner()
    else:
        closed = curve.is_closed and n > 2
        prev = pts[index - 1] if (index > 0 or closed) else None
        nxt = pts[(index + 1) % n] if (index < n - 1 or closed) else None
        pts[index] = p.with_handles(*synthesize_handles(prev, p, nxt, smoothing))
    return replace_points(curve, pts)
