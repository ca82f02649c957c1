import logging
from dataclasses import replace
from enum import Enum

from quill.core.config import DEFAULT_THRESHOLDS, Thresholds
from quill.core.curve import Curve, CurvePoint, insert_point, remove_point, toggle_point_type
from quill.core.errors import MinimumPointsViolation
from quill.core.handles import handle_at
from quill.core.host import Button, Host, Key, KeyEvent, PointerEvent, Tool
from quill.core.math import Point, anchor_index_at, nearest_segment, point_on_segment

logger = logging.getLogger(__name__)


class EditingState(Enum):
    EDITING = "editing"
    EXITED = "exited"


class EditResult(Enum):
    NONE = "none"
    DRAG_HANDLE = "drag-handle"
    INSERTED = "inserted"
    REMOVED = "removed"
    TOGGLED = "toggled"
    EXITED = "exited"


class HoverPreviewLoop:
    """
    Per-frame insertion preview while alt is held over a curve in edit mode.

    Each frame writes (or clears) `hover_point` / `hover_segment_index` on the
    shape and schedules the next frame. The loop stops scheduling as soon as
    edit mode ends, the tool is no longer the select tool, or alt is released.
    """

    def __init__(self, host: Host, shape_id: str, thresholds: Thresholds = DEFAULT_THRESHOLDS):
        self._host = host
        self._shape_id = shape_id
        self._th = thresholds
        self._handle: int | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is None:
            self._handle = self._host.request_frame(self._tick)

    def stop(self, clear: bool = True) -> None:
        if self._handle is not None:
            self._host.cancel_frame(self._handle)
            self._handle = None
        if clear:
            self.clear()

    def clear(self) -> None:
        curve = self._host.get_shape(self._shape_id)
        if curve is None:
            return
        cleared = curve.clear_hover()
        if cleared is not curve:
            self._host.update_shape(cleared)

    def preview_at(self, curve: Curve, local: Point) -> tuple[Point, int] | None:
        hit = nearest_segment(
            curve.points, curve.is_closed, local, self._host.zoom(),
            threshold_px=self._th.path_segment,
            exclusion_px=self._th.anchor_point_hover,
        )
        if hit is None:
            return None
        index, t = hit
        return point_on_segment(*curve.segment(index), t), index

    def _tick(self) -> None:
        self._handle = None
        curve = self._host.get_shape(self._shape_id)
        if curve is None:
            return
        if not curve.edit_mode or self._host.current_tool() is not Tool.SELECT:
            self.clear()
            return
        inputs = self._host.inputs()
        if not inputs.modifiers.alt:
            self.clear()
            return

        if inputs.is_dragging or inputs.is_pointing:
            self.clear()
        else:
            found = self.preview_at(curve, curve.to_local(inputs.position))
            if found is None:
                self.clear()
            else:
                point, index = found
                if (point, index) != (curve.hover_point, curve.hover_segment_index):
                    self._host.update_shape(replace(curve, hover_point=point, hover_segment_index=index))
        self._handle = self._host.request_frame(self._tick)


class EditingMachine:
    """
    Structural edits on a committed curve in edit mode:
      - press on an anchor or handle: left to the host's drag machinery
      - press on a segment: insert a corner point there
      - double-click an anchor: remove it (alt: toggle corner/smooth)
      - Escape / Enter: leave edit mode
    """

    def __init__(self, host: Host, shape_id: str, thresholds: Thresholds = DEFAULT_THRESHOLDS):
        self._host = host
        self.shape_id = shape_id
        self._th = thresholds
        self.hover = HoverPreviewLoop(host, shape_id, thresholds)
        self.pressed_anchor: int | None = None

        curve = host.get_shape(shape_id)
        if curve is None:
            raise KeyError(shape_id)
        if not curve.edit_mode:
            host.update_shape(replace(curve, edit_mode=True))
        self.state = EditingState.EDITING
        logger.debug("Editing %s", shape_id)

    # ---- helpers ------------------------------------------------------------
    @property
    def is_finished(self) -> bool:
        return self.state is EditingState.EXITED

    def curve(self) -> Curve | None:
        """The live shape, or None once edit mode has ended (here or externally)."""
        if self.is_finished:
            return None
        curve = self._host.get_shape(self.shape_id)
        if curve is None or not curve.edit_mode:
            self.hover.stop(clear=curve is not None)
            self.state = EditingState.EXITED
            return None
        return curve

    def _px(self, value: float) -> float:
        return self._th.px(value, self._host.zoom())

    def _anchor_at(self, curve: Curve, local: Point) -> int | None:
        return anchor_index_at(curve.points, local, self._px(self._th.anchor_point))

    def _outside(self, curve: Curve, page: Point) -> bool:
        pad = self._px(self._th.path_segment)
        x, y, w, h = curve.page_bounds()
        return not (x - pad <= page[0] <= x + w + pad and y - pad <= page[1] <= y + h + pad)

    # ---- events -------------------------------------------------------------
    def on_pointer_down(self, e: PointerEvent) -> EditResult:
        curve = self.curve()
        if curve is None or e.button is not Button.LEFT:
            return EditResult.EXITED if curve is None else EditResult.NONE
        local = curve.to_local(e.position)
        zoom = self._host.zoom()

        self.pressed_anchor = self._anchor_at(curve, local)
        if self.pressed_anchor is not None or handle_at(curve, local, zoom, self._th) is not None:
            self.hover.stop()
            return EditResult.DRAG_HANDLE

        hit = nearest_segment(
            curve.points, curve.is_closed, local, zoom,
            threshold_px=self._th.path_segment,
            exclusion_px=self._th.segment_anchor_exclusion,
        )
        if hit is not None:
            self.hover.stop(clear=False)
            self._host.update_shape(insert_point(curve.clear_hover(), hit[0], CurvePoint(local)))
            return EditResult.INSERTED

        if self._outside(curve, e.position):
            self.exit()
            return EditResult.EXITED
        return EditResult.NONE

    def on_double_click(self, e: PointerEvent) -> EditResult:
        curve = self.curve()
        if curve is None:
            return EditResult.EXITED
        index = self._anchor_at(curve, curve.to_local(e.position))
        if index is None:
            return EditResult.NONE

        if e.modifiers.alt:
            self._host.update_shape(toggle_point_type(curve.clear_hover(), index, self._th.smoothing))
            return EditResult.TOGGLED
        return self._remove(curve, index)

    def _remove(self, curve: Curve, index: int) -> EditResult:
        self.pressed_anchor = None
        try:
            updated = remove_point(curve.clear_hover(), index)
        except MinimumPointsViolation:
            logger.debug("Keeping point %d of %s: minimum reached", index, self.shape_id)
            return EditResult.NONE
        self._host.update_shape(updated)
        return EditResult.REMOVED

    def on_pointer_move(self, e: PointerEvent) -> EditResult:
        if self.curve() is None:
            return EditResult.EXITED
        if e.modifiers.alt:
            self.hover.start()
        return EditResult.NONE

    def on_key_down(self, e: KeyEvent) -> EditResult:
        if self.curve() is None:
            return EditResult.EXITED
        match e.key:
            case Key.ESCAPE | Key.ENTER:
                self.exit()
                return EditResult.EXITED
            case Key.DELETE if self.pressed_anchor is not None:
                return self._remove(self.curve(), self.pressed_anchor)
            case Key.ALT:
                self.hover.start()
        return EditResult.NONE

    def exit(self) -> None:
        """Leave edit mode in one update and hand selection back to the host."""
        if self.is_finished:
            return
        self.hover.stop(clear=False)
        curve = self._host.get_shape(self.shape_id)
        if curve is not None:
            self._host.update_shape(replace(curve.clear_hover(), edit_mode=False))
            self._host.select([self.shape_id])
        self._host.set_tool(Tool.SELECT)
        self.state = EditingState.EXITED
        logger.debug("Left edit mode for %s", self.shape_id)
