from dataclasses import dataclass
from enum import Enum

from .config import DEFAULT_THRESHOLDS, Thresholds
from .curve import Curve, CurvePoint, replace_points
from .errors import InvalidHandleId, InvalidPointIndex
from .math import Point, dist


class HandleKind(Enum):
    VERTEX = "vertex"
    VIRTUAL = "virtual"


class HandleRole(Enum):
    ANCHOR = "anchor"
    CP_IN = "cp-in"
    CP_OUT = "cp-out"


@dataclass(frozen=True)
class Handle:
    id: str
    kind: HandleKind
    position: Point

    @property
    def index(self) -> int:
        return parse_handle_id(self.id)[0]

    @property
    def role(self) -> HandleRole:
        return parse_handle_id(self.id)[1]


def handle_id(index: int, role: HandleRole) -> str:
    return f"{index}:{role.value}"


def parse_handle_id(hid: str) -> tuple[int, HandleRole]:
    idx, sep, role = hid.partition(":")
    if not sep:
        raise InvalidHandleId(hid)
    try:
        return int(idx), HandleRole(role)
    except ValueError:
        raise InvalidHandleId(hid) from None


def project_handles(curve: Curve) -> list[Handle]:
    """
    One vertex handle per anchor followed by a virtual handle for each
    control point it carries, in path order.
    """
    handles: list[Handle] = []
    for i, p in enumerate(curve.points):
        handles.append(Handle(handle_id(i, HandleRole.ANCHOR), HandleKind.VERTEX, p.position))
        if p.incoming is not None:
            handles.append(Handle(handle_id(i, HandleRole.CP_IN), HandleKind.VIRTUAL, p.incoming))
        if p.outgoing is not None:
            handles.append(Handle(handle_id(i, HandleRole.CP_OUT), HandleKind.VIRTUAL, p.outgoing))
    return handles


def handle_at(curve: Curve, local_point: Point, zoom: float,
              thresholds: Thresholds = DEFAULT_THRESHOLDS) -> Handle | None:
    """Anchors are tested before control points."""
    anchor_r = thresholds.px(thresholds.anchor_point, zoom)
    control_r = thresholds.px(thresholds.control_point, zoom)
    handles = project_handles(curve)
    for h in handles:
        if h.kind is HandleKind.VERTEX and dist(h.position, local_point) < anchor_r:
            return h
    for h in handles:
        if h.kind is HandleKind.VIRTUAL and dist(h.position, local_point) < control_r:
            return h
    return None


def apply_handle_move(curve: Curve, hid: str, position: Point, *, symmetric: bool = False) -> Curve:
    """
    Write a moved handle back into its point and renormalize. With
    `symmetric`, the opposite control point (if any) is mirrored through the
    anchor.
    """
    index, role = parse_handle_id(hid)
    n = len(curve.points)
    if not 0 <= index < n:
        raise InvalidPointIndex(index, n)
    pos = (float(position[0]), float(position[1]))
    p = curve.points[index]

    match role:
        case HandleRole.ANCHOR:
            new = CurvePoint(pos, p.incoming, p.outgoing)
        case HandleRole.CP_IN:
            outgoing = p.outgoing
            if symmetric and outgoing is not None:
                outgoing = (2.0 * p.x - pos[0], 2.0 * p.y - pos[1])
            new = p.with_handles(pos, outgoing)
        case HandleRole.CP_OUT:
            incoming = p.incoming
            if symmetric and incoming is not None:
                incoming = (2.0 * p.x - pos[0], 2.0 * p.y - pos[1])
            new = p.with_handles(incoming, pos)

    pts = list(curve.points)
    pts[index] = new
    return replace_points(curve, pts)
