import logging
import math
from enum import Enum
from typing import Literal, Sequence, TYPE_CHECKING

from .errors import DegenerateGeometry

if TYPE_CHECKING:
    from .curve import CurvePoint

logger = logging.getLogger(__name__)

Point = tuple[float, float]
Op = tuple[Literal["M", "L", "Q", "C", "Z"], tuple]


class SegmentKind(Enum):
    LINE = "line"
    QUADRATIC = "quadratic"
    CUBIC = "cubic"


# ---- vector helpers ---------------------------------------------------------
def dist2(a: Point, b: Point) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def dist(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def lerp(a: Point, b: Point, t: float) -> Point:
    return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t


def unit(v: Point) -> Point:
    length = math.hypot(v[0], v[1])
    if length == 0.0:
        raise DegenerateGeometry(f"Cannot normalize zero-length vector {v}")
    return v[0] / length, v[1] / length


def constrain_angle(offset: Point) -> Point:
    """Snap a vector to the nearest 45 degree direction, keeping its length."""
    angle = math.atan2(offset[1], offset[0])
    step = math.pi / 4.0
    snapped = round(angle / step) * step
    magnitude = math.hypot(offset[0], offset[1])
    return math.cos(snapped) * magnitude, math.sin(snapped) * magnitude


# ---- segment evaluation -----------------------------------------------------
def segment_kind(p1: "CurvePoint", p2: "CurvePoint") -> SegmentKind:
    """
    Basis selection shared by evaluation and path serialization:
    both facing handles -> cubic, exactly one -> quadratic, none -> line.
    """
    if p1.outgoing is not None and p2.incoming is not None:
        return SegmentKind.CUBIC
    if p1.outgoing is not None or p2.incoming is not None:
        return SegmentKind.QUADRATIC
    return SegmentKind.LINE


def quadratic_control(p1: "CurvePoint", p2: "CurvePoint") -> Point:
    """The single control point of a quadratic segment (outgoing wins)."""
    if p1.outgoing is not None:
        return p1.outgoing
    if p2.incoming is not None:
        return p2.incoming
    raise ValueError("Segment has no control point")


def _cubic_eval(p0: Point, c1: Point, c2: Point, p3: Point, t: float) -> Point:
    u = 1.0 - t
    uu = u * u
    tt = t * t
    uuu = uu * u
    ttt = tt * t
    x = uuu * p0[0] + 3.0 * uu * t * c1[0] + 3.0 * u * tt * c2[0] + ttt * p3[0]
    y = uuu * p0[1] + 3.0 * uu * t * c1[1] + 3.0 * u * tt * c2[1] + ttt * p3[1]
    return x, y


def _quadratic_eval(p0: Point, c: Point, p2: Point, t: float) -> Point:
    u = 1.0 - t
    x = u * u * p0[0] + 2.0 * u * t * c[0] + t * t * p2[0]
    y = u * u * p0[1] + 2.0 * u * t * c[1] + t * t * p2[1]
    return x, y


def point_on_segment(p1: "CurvePoint", p2: "CurvePoint", t: float) -> Point:
    match segment_kind(p1, p2):
        case SegmentKind.CUBIC:
            return _cubic_eval(p1.position, p1.outgoing, p2.incoming, p2.position, t)
        case SegmentKind.QUADRATIC:
            return _quadratic_eval(p1.position, quadratic_control(p1, p2), p2.position, t)
        case SegmentKind.LINE:
            return lerp(p1.position, p2.position, t)


# ---- hit-testing ------------------------------------------------------------
def project_to_chord(point: Point, a: Point, b: Point) -> tuple[float, float]:
    """
    Project `point` onto the straight chord a->b.
    Returns (t, distance) with t clamped to [0, 1].
    """
    ax, ay = a
    bx, by = b
    px, py = point
    vx, vy = bx - ax, by - ay
    denom = vx * vx + vy * vy
    if denom == 0.0:
        return 0.0, dist(point, a)
    t = ((px - ax) * vx + (py - ay) * vy) / denom
    if t < 0.0:
        t = 0.0
    elif t > 1.0:
        t = 1.0
    return t, dist(point, (ax + t * vx, ay + t * vy))


def distance_to_segment(point: Point, p1: "CurvePoint", p2: "CurvePoint") -> float:
    """
    Distance used by every hit-test. Curved segments are approximated by the
    straight chord between their anchors.
    """
    return project_to_chord(point, p1.position, p2.position)[1]


def anchor_index_at(points: Sequence["CurvePoint"], query: Point, radius: float) -> int | None:
    """First anchor strictly within `radius` of `query` (model space)."""
    for i, p in enumerate(points):
        if dist(p.position, query) < radius:
            return i
    return None


def iter_segments(points: Sequence["CurvePoint"], is_closed: bool):
    """Yield (index, p1, p2) for every segment, closing segment last."""
    n = len(points)
    for i in range(n - 1):
        yield i, points[i], points[i + 1]
    if is_closed and n > 2:
        yield n - 1, points[-1], points[0]


def nearest_segment(
        points: Sequence["CurvePoint"],
        is_closed: bool,
        query: Point,
        zoom: float,
        *,
        threshold_px: float = 10.0,
        exclusion_px: float = 12.0,
) -> tuple[int, float] | None:
    """
    Return (segment_index, t) of the segment closest to `query`, or None when
    nothing lies within `threshold_px` screen pixels. Anchors win: a query within
    `exclusion_px` of any anchor never reports a segment.
    """
    if zoom <= 0.0:
        raise ValueError(f"zoom must be positive, got {zoom}")
    if anchor_index_at(points, query, exclusion_px / zoom) is not None:
        return None

    threshold = threshold_px / zoom
    best: tuple[int, float] | None = None
    best_d = float("inf")
    for i, p1, p2 in iter_segments(points, is_closed):
        t, d = project_to_chord(query, p1.position, p2.position)
        if d < threshold and d < best_d:
            best_d = d
            best = (i, t)
    return best


# ---- handle synthesis -------------------------------------------------------
def synthesize_handles(
        prev: "CurvePoint | None",
        current: "CurvePoint",
        nxt: "CurvePoint | None",
        smoothing: float,
) -> tuple[Point | None, Point | None]:
    """
    Derive (incoming, outgoing) handles for `current` from its neighbours.

    Interior points get handles along the tangent `nxt - prev`, each sized by the
    distance to the neighbour on that side times `smoothing`. Endpoints get a
    single handle pointing along the one available neighbour. Coincident
    neighbours collapse both handles onto the anchor.
    """
    s = min(1.0, max(0.0, float(smoothing)))
    cx, cy = current.position

    if prev is None and nxt is None:
        return None, None

    try:
        if prev is not None and nxt is not None:
            ux, uy = unit((nxt.x - prev.x, nxt.y - prev.y))
            d_in = dist(current.position, prev.position) * s
            d_out = dist(nxt.position, current.position) * s
            return (cx - ux * d_in, cy - uy * d_in), (cx + ux * d_out, cy + uy * d_out)
        if prev is not None:
            ux, uy = unit((cx - prev.x, cy - prev.y))
            d_in = dist(current.position, prev.position) * s
            return (cx - ux * d_in, cy - uy * d_in), None
        ux, uy = unit((nxt.x - cx, nxt.y - cy))
        d_out = dist(nxt.position, current.position) * s
        return None, (cx + ux * d_out, cy + uy * d_out)
    except DegenerateGeometry:
        logger.debug("Zero-length tangent at %s, falling back to corner handles", current.position)
        return (None if prev is None else (cx, cy)), (None if nxt is None else (cx, cy))


def handles_from_drag(anchor: Point, offset: Point, *, asymmetric: bool = False) -> tuple[Point | None, Point | None]:
    """
    Handles authored by dragging away from a freshly placed anchor: the
    outgoing handle follows the pointer, the incoming one mirrors it unless
    `asymmetric` is set.
    """
    ax, ay = anchor
    outgoing = (ax + offset[0], ay + offset[1])
    if asymmetric:
        return None, outgoing
    return (ax - offset[0], ay - offset[1]), outgoing
