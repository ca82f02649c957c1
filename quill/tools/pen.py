import logging

from quill.core.config import DEFAULT_THRESHOLDS, Thresholds
from quill.core.curve import Curve, move_point
from quill.core.handles import HandleRole, apply_handle_move, handle_at, parse_handle_id
from quill.core.host import Host, Key, KeyEvent, PointerEvent, Tool
from quill.core.math import Point, anchor_index_at, nearest_segment

from .creating import CreationMachine
from .editing import EditingMachine, EditResult

logger = logging.getLogger(__name__)


def curve_at(host: Host, page_point: Point, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> Curve | None:
    """Top-most curve with an anchor or segment under `page_point`."""
    zoom = host.zoom()
    for curve in reversed(list(host.shapes())):
        local = curve.to_local(page_point)
        if anchor_index_at(curve.points, local, thresholds.px(thresholds.anchor_point, zoom)) is not None:
            return curve
        hit = nearest_segment(curve.points, curve.is_closed, local, zoom,
                              threshold_px=thresholds.path_segment, exclusion_px=0)
        if hit is not None:
            return curve
    return None


class PenTool:
    """
    Routes host input to whichever machine is live.

    With nothing active, a press under the pen tool either re-enters a curve
    that is in edit mode or starts drawing a new one; a double-click under the
    select tool puts the curve beneath it into edit mode. Handle drags reported
    by the editing machine are carried out here.
    """

    def __init__(self, host: Host, thresholds: Thresholds = DEFAULT_THRESHOLDS,
                 freehand: bool = False, **style):
        self.host = host
        self.thresholds = thresholds
        self.freehand = freehand
        self.style = style
        self._active: CreationMachine | EditingMachine | None = None
        self._drag: str | None = None

    @property
    def active(self) -> CreationMachine | EditingMachine | None:
        if self._active is not None and self._active.is_finished:
            self._active = None
            self._drag = None
        return self._active

    @property
    def dragging(self) -> str | None:
        """Id of the handle being dragged, if any."""
        return self._drag

    def edit(self, shape_id: str) -> EditingMachine:
        m = self.active
        if isinstance(m, CreationMachine):
            m.commit()
        elif isinstance(m, EditingMachine) and m.shape_id != shape_id:
            m.exit()
        elif isinstance(m, EditingMachine):
            return m
        self._active = EditingMachine(self.host, shape_id, self.thresholds)
        self.host.select([shape_id])
        return self._active

    def draw(self) -> CreationMachine:
        self._active = CreationMachine(self.host, self.thresholds, self.freehand, **self.style)
        return self._active

    # ---- events -------------------------------------------------------------
    def on_pointer_down(self, e: PointerEvent):
        m = self.active
        if isinstance(m, EditingMachine):
            result = m.on_pointer_down(e)
            if result is EditResult.DRAG_HANDLE:
                curve = m.curve()
                handle = handle_at(curve, curve.to_local(e.position), self.host.zoom(), self.thresholds)
                self._drag = handle.id if handle is not None else None
            return result
        if m is not None:
            return m.on_pointer_down(e)

        if self.host.current_tool() is not Tool.PEN:
            return None
        hit = curve_at(self.host, e.position, self.thresholds)
        if hit is not None and hit.edit_mode:
            return self.edit(hit.id).on_pointer_down(e)
        return self.draw().on_pointer_down(e)

    def on_pointer_move(self, e: PointerEvent):
        m = self.active
        if self._drag is not None and isinstance(m, EditingMachine):
            curve = m.curve()
            if curve is not None:
                local = curve.to_local(e.position)
                index, role = parse_handle_id(self._drag)
                if role is HandleRole.ANCHOR:
                    moved = move_point(curve, index, local)
                else:
                    moved = apply_handle_move(curve, self._drag, local, symmetric=not e.modifiers.ctrl)
                self.host.update_shape(moved)
            return EditResult.DRAG_HANDLE
        if m is not None:
            return m.on_pointer_move(e)
        return None

    def on_pointer_up(self, e: PointerEvent):
        self._drag = None
        m = self.active
        if isinstance(m, CreationMachine):
            return m.on_pointer_up(e)
        return None

    def on_double_click(self, e: PointerEvent):
        m = self.active
        if m is not None:
            return m.on_double_click(e)
        if self.host.current_tool() is Tool.SELECT:
            hit = curve_at(self.host, e.position, self.thresholds)
            if hit is not None:
                self.edit(hit.id)
                return EditResult.NONE
        return None

    def on_key_down(self, e: KeyEvent):
        m = self.active
        if m is not None:
            return m.on_key_down(e)
        if e.key is Key.ESCAPE and self.host.current_tool() is Tool.PEN:
            self.host.set_tool(Tool.SELECT)
        return None
