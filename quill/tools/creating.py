import logging
from enum import Enum

from quill.core.config import DEFAULT_THRESHOLDS, Thresholds
from quill.core.curve import Curve, CurvePoint, new_curve_id, normalize
from quill.core.host import Button, Host, Key, KeyEvent, PointerEvent, Tool
from quill.core.math import Point, constrain_angle, dist, handles_from_drag, synthesize_handles

logger = logging.getLogger(__name__)


class CreationState(Enum):
    IDLE = "idle"
    CREATING = "creating"
    COMMITTED = "committed"
    DISCARDED = "discarded"


class CreationMachine:
    """
    Drives the drawing of a new curve, one anchor per click:
      - drag after placing an anchor to pull out its handles
        (shift: 45 degree steps, alt: outgoing handle only)
      - click the first anchor (3+ points) to close and finish
      - double-click / Enter finishes open, Escape throws the curve away
    With `freehand`, dragging keeps dropping smoothed anchors instead.

    Anchors are tracked in page coordinates; every change is pushed to the
    host as a whole normalized Curve.
    """

    def __init__(self, host: Host, thresholds: Thresholds = DEFAULT_THRESHOLDS,
                 freehand: bool = False, **style):
        self._host = host
        self._th = thresholds
        self.freehand = freehand
        self._style = style

        self.state = CreationState.IDLE
        self.shape_id: str = new_curve_id()
        self._points: list[CurvePoint] = []
        self._closed = False
        self._created = False

        self._dragging = False
        self._drag_origin: Point | None = None
        self.preview_point: Point | None = None
        self._last_press: Point | None = None
        self._repeat_press = False

    # ---- accessors ----------------------------------------------------------
    @property
    def points(self) -> tuple[CurvePoint, ...]:
        """Anchors in page coordinates."""
        return tuple(self._points)

    @property
    def is_finished(self) -> bool:
        return self.state in (CreationState.COMMITTED, CreationState.DISCARDED)

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    def curve(self) -> Curve | None:
        return self._host.get_shape(self.shape_id)

    # ---- helpers ------------------------------------------------------------
    def _px(self, value: float) -> float:
        return self._th.px(value, self._host.zoom())

    def _near_first(self, pos: Point) -> bool:
        return (len(self._points) > 2
                and dist(pos, self._points[0].position) < self._px(self._th.close_curve))

    def _sync(self, edit_mode: bool = True) -> None:
        curve = normalize(Curve(
            id=self.shape_id,
            points=tuple(self._points),
            is_closed=self._closed,
            edit_mode=edit_mode,
            **self._style,
        ))
        if self._created:
            self._host.update_shape(curve)
        else:
            self._host.create_shape(curve)
            self._created = True

    def _add_point(self, pos: Point) -> None:
        self._points.append(CurvePoint((float(pos[0]), float(pos[1]))))
        self._sync()

    def _smooth_tail(self) -> None:
        n = len(self._points)
        for i in range(max(0, n - 3), n):
            prev = self._points[i - 1] if i > 0 else None
            nxt = self._points[i + 1] if i < n - 1 else None
            anchor = self._points[i].as_corner()
            self._points[i] = anchor.with_handles(*synthesize_handles(prev, anchor, nxt, self._th.smoothing))

    # ---- events -------------------------------------------------------------
    def on_pointer_down(self, e: PointerEvent) -> CreationState:
        if self.is_finished or e.button is not Button.LEFT:
            return self.state
        pos = e.position
        self._repeat_press = (self._last_press is not None
                              and dist(pos, self._last_press) < self._px(self._th.anchor_point))
        self._last_press = pos

        if self.state is CreationState.IDLE:
            self.state = CreationState.CREATING
            logger.debug("Creating %s at %s", self.shape_id, pos)
        elif self._near_first(pos):
            self._closed = True
            return self.commit()

        self._add_point(pos)
        self._dragging = True
        self._drag_origin = self._points[-1].position
        self.preview_point = None
        return self.state

    def on_pointer_move(self, e: PointerEvent) -> CreationState:
        if self.state is not CreationState.CREATING:
            return self.state
        pos = e.position
        if self._last_press is not None and dist(pos, self._last_press) >= self._px(self._th.anchor_point):
            self._last_press = None

        if not self._dragging:
            # rubber band towards the cursor, snapping onto the first anchor
            self.preview_point = self._points[0].position if self._near_first(pos) else pos
            return self.state

        if self.freehand:
            if dist(pos, self._points[-1].position) >= self._px(self._th.freehand_spacing):
                self._points.append(CurvePoint((float(pos[0]), float(pos[1]))))
                self._smooth_tail()
                self._sync()
            return self.state

        origin = self._drag_origin
        offset = (pos[0] - origin[0], pos[1] - origin[1])
        last = self._points[-1]
        if dist(pos, origin) * self._host.zoom() > self._th.corner_point_drag:
            if e.modifiers.shift:
                offset = constrain_angle(offset)
            incoming, outgoing = handles_from_drag(origin, offset, asymmetric=e.modifiers.alt)
            self._points[-1] = last.with_handles(incoming, outgoing)
        else:
            self._points[-1] = last.as_corner()
        self._sync()
        return self.state

    def on_pointer_up(self, e: PointerEvent) -> CreationState:
        if e.button is Button.LEFT:
            self._dragging = False
            self._drag_origin = None
        return self.state

    def on_double_click(self, e: PointerEvent) -> CreationState:
        if self.state is not CreationState.CREATING:
            return self.state
        # the second press of a double-click lands on the anchor the first one made
        if self._repeat_press and len(self._points) >= 2:
            self._points.pop()
            self._repeat_press = False
        return self.commit()

    def on_key_down(self, e: KeyEvent) -> CreationState:
        if self.state is not CreationState.CREATING:
            return self.state
        match e.key:
            case Key.ENTER:
                return self.commit()
            case Key.ESCAPE:
                return self.discard()
            case Key.CLOSE if len(self._points) > 2:
                self._closed = True
                return self.commit()
        return self.state

    # ---- terminal transitions -----------------------------------------------
    def commit(self) -> CreationState:
        if self.is_finished:
            return self.state
        if len(self._points) < 2:
            logger.debug("Not enough points to commit %s", self.shape_id)
            return self.discard()
        self._dragging = False
        self.preview_point = None
        self._sync(edit_mode=False)
        self.state = CreationState.COMMITTED
        self._host.select([self.shape_id])
        self._host.set_tool(Tool.SELECT)
        logger.debug("Committed %s with %d points (closed=%s)", self.shape_id, len(self._points), self._closed)
        return self.state

    def discard(self) -> CreationState:
        if self.is_finished:
            return self.state
        if self._created:
            self._host.delete_shape(self.shape_id)
        self._dragging = False
        self.preview_point = None
        self.state = CreationState.DISCARDED
        logger.debug("Discarded %s", self.shape_id)
        return self.state
