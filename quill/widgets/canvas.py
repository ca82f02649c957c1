import itertools
import logging
from typing import Iterable

from PySide6 import QtCore, QtGui, QtWidgets

from quill.core import (Button, Curve, Host, InputState, Key, KeyEvent, Modifiers,
                        PointerEvent, ShapeStore, Tool, project_handles, to_path)
from quill.core.handles import HandleKind
from quill.core.host import FrameCallback
from quill.tools import CreationMachine, PenTool
from quill.widgets.utils import make_qpath, point_to_qpoint, qpoint_to_point, qt_modifiers

logger = logging.getLogger(__name__)

FRAME_MS = 16

_KEYS = {
    QtCore.Qt.Key.Key_Return: Key.ENTER,
    QtCore.Qt.Key.Key_Enter: Key.ENTER,
    QtCore.Qt.Key.Key_Escape: Key.ESCAPE,
    QtCore.Qt.Key.Key_C: Key.CLOSE,
    QtCore.Qt.Key.Key_Delete: Key.DELETE,
    QtCore.Qt.Key.Key_Alt: Key.ALT,
}

_BUTTONS = {
    QtCore.Qt.MouseButton.LeftButton: Button.LEFT,
    QtCore.Qt.MouseButton.RightButton: Button.RIGHT,
    QtCore.Qt.MouseButton.MiddleButton: Button.MIDDLE,
}


class QtHost(Host):
    """
    Host side of a CurveCanvasWidget: shapes live in a ShapeStore, input and
    zoom are read off the widget and frames are single-shot Qt timers.
    """

    def __init__(self, canvas: "CurveCanvasWidget", store: ShapeStore | None = None):
        self._canvas = canvas
        self.store = store if store is not None else ShapeStore()
        self.selection: list[str] = []
        self._frames: dict[int, FrameCallback] = {}
        self._frame_ids = itertools.count(1)

    def _changed(self) -> None:
        self._canvas.shapesChanged.emit()
        self._canvas.update()

    def create_shape(self, curve: Curve) -> None:
        self.store.add(curve)
        self._changed()

    def get_shape(self, shape_id: str) -> Curve | None:
        return self.store.get(shape_id)

    def update_shape(self, curve: Curve) -> None:
        self.store.replace(curve)
        self._changed()

    def delete_shape(self, shape_id: str) -> None:
        self.store.remove(shape_id)
        self.selection = [i for i in self.selection if i != shape_id]
        self._changed()

    def shapes(self) -> Iterable[Curve]:
        return iter(self.store)

    def zoom(self) -> float:
        return self._canvas.zoom

    def inputs(self) -> InputState:
        return self._canvas.input_state()

    def current_tool(self) -> Tool:
        return self._canvas.tool

    def set_tool(self, tool: Tool) -> None:
        self._canvas.set_tool(tool)

    def select(self, shape_ids: Iterable[str]) -> None:
        self.selection = list(shape_ids)
        self._canvas.update()

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._frame_ids)
        self._frames[handle] = callback
        QtCore.QTimer.singleShot(FRAME_MS, lambda h=handle: self._fire(h))
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._frames.pop(handle, None)

    def _fire(self, handle: int) -> None:
        cb = self._frames.pop(handle, None)
        if cb is not None:
            cb()


class CurveCanvasWidget(QtWidgets.QWidget):
    """
    Drawing surface for curves. Widget coordinates divided by `zoom` are page
    coordinates; all input is forwarded to a PenTool.
    """

    shapesChanged = QtCore.Signal()
    toolChanged = QtCore.Signal(object)

    def __init__(self, store: ShapeStore | None = None, zoom: float = 1.0,
                 freehand: bool = False, parent=None):
        super().__init__(parent)
        self._zoom = zoom
        self._tool = Tool.SELECT
        self._pos = (0.0, 0.0)
        self._mods = Modifiers()
        self._pressed = False
        self._dragging = False

        self.host = QtHost(self, store)
        self.pen = PenTool(self.host, freehand=freehand)

        self.setMouseTracking(True)
        self.setFocusPolicy(QtCore.Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(400, 300)

    # ---- public API ---------------------------------------------------------
    @property
    def zoom(self) -> float:
        return self._zoom

    def set_zoom(self, zoom: float) -> None:
        if zoom <= 0:
            raise ValueError(f"zoom must be positive, got {zoom}")
        self._zoom = zoom
        self.update()

    @property
    def tool(self) -> Tool:
        return self._tool

    def set_tool(self, tool: Tool) -> None:
        if tool is self._tool:
            return
        logger.debug("Tool %s -> %s", self._tool, tool)
        self._tool = tool
        self.setCursor(QtCore.Qt.CursorShape.CrossCursor if tool is Tool.PEN else QtCore.Qt.CursorShape.ArrowCursor)
        self.toolChanged.emit(tool)

    @property
    def store(self) -> ShapeStore:
        return self.host.store

    def input_state(self) -> InputState:
        return InputState(self._pos, self._mods, self._pressed, self._dragging)

    # ---- event translation --------------------------------------------------
    def _to_page(self, pos: QtCore.QPointF) -> tuple[float, float]:
        x, y = qpoint_to_point(pos)
        return x / self._zoom, y / self._zoom

    def _pointer(self, e: QtGui.QMouseEvent) -> PointerEvent:
        self._pos = self._to_page(QtCore.QPointF(e.position()))
        self._mods = qt_modifiers(e.modifiers())
        return PointerEvent(self._pos, _BUTTONS.get(e.button(), Button.LEFT), self._mods)

    def mousePressEvent(self, e: QtGui.QMouseEvent):
        ev = self._pointer(e)
        self._pressed = e.button() == QtCore.Qt.MouseButton.LeftButton
        self.pen.on_pointer_down(ev)
        self.update()

    def mouseMoveEvent(self, e: QtGui.QMouseEvent):
        ev = self._pointer(e)
        self._dragging = self._pressed
        self.pen.on_pointer_move(ev)
        self.update()

    def mouseReleaseEvent(self, e: QtGui.QMouseEvent):
        ev = self._pointer(e)
        if e.button() == QtCore.Qt.MouseButton.LeftButton:
            self._pressed = False
            self._dragging = False
        self.pen.on_pointer_up(ev)
        self.update()

    def mouseDoubleClickEvent(self, e: QtGui.QMouseEvent):
        # Qt delivers the second press of a double-click here instead of mousePressEvent
        ev = self._pointer(e)
        self._pressed = e.button() == QtCore.Qt.MouseButton.LeftButton
        self.pen.on_pointer_down(ev)
        self.pen.on_double_click(ev)
        self.update()

    def keyPressEvent(self, e: QtGui.QKeyEvent):
        self._mods = qt_modifiers(e.modifiers())
        key = _KEYS.get(QtCore.Qt.Key(e.key()), Key.OTHER)
        if key is Key.OTHER:
            super().keyPressEvent(e)
            return
        self.pen.on_key_down(KeyEvent(key, self._mods))
        self.update()

    def keyReleaseEvent(self, e: QtGui.QKeyEvent):
        self._mods = qt_modifiers(e.modifiers())
        super().keyReleaseEvent(e)

    # ---- painting -----------------------------------------------------------
    def _paint_handles(self, p: QtGui.QPainter, curve: Curve):
        ox, oy = curve.x, curve.y
        at = lambda t: QtCore.QPointF(t[0] + ox, t[1] + oy)
        r = 4.0 / self._zoom

        p.setPen(QtGui.QPen(QtGui.QColor(0, 0, 0, 60), 0, QtCore.Qt.PenStyle.DashLine))
        for pt in curve.page_points():
            for cp in (pt.incoming, pt.outgoing):
                if cp is not None:
                    p.drawLine(QtCore.QPointF(*pt.position), QtCore.QPointF(*cp))

        for h in project_handles(curve):
            if h.kind is HandleKind.VERTEX:
                p.setPen(QtGui.QPen(QtGui.QColor(0, 0, 0), 0))
                p.setBrush(QtGui.QBrush(QtGui.QColor(255, 255, 255)))
                p.drawRect(QtCore.QRectF(at(h.position) - QtCore.QPointF(r, r), QtCore.QSizeF(2 * r, 2 * r)))
            else:
                p.setPen(QtGui.QPen(QtGui.QColor(30, 120, 255), 0))
                p.setBrush(QtGui.QBrush(QtGui.QColor(30, 120, 255)))
                p.drawEllipse(at(h.position), r * 0.75, r * 0.75)

        if curve.hover_point is not None:
            p.setPen(QtCore.Qt.PenStyle.NoPen)
            p.setBrush(QtGui.QBrush(QtGui.QColor(30, 120, 255, 160)))
            p.drawEllipse(at(curve.hover_point), r, r)

    def paintEvent(self, _):
        p = QtGui.QPainter(self)
        p.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        p.fillRect(self.rect(), QtGui.QColor(250, 250, 250))
        p.scale(self._zoom, self._zoom)

        for curve in self.store:
            path = make_qpath(to_path(curve), (curve.x, curve.y))
            p.setPen(QtGui.QPen(QtGui.QColor(curve.color), curve.stroke_width / self._zoom))
            p.setBrush(QtGui.QBrush(QtGui.QColor(curve.color)) if curve.fill and curve.is_closed
                       else QtCore.Qt.BrushStyle.NoBrush)
            p.drawPath(path)

            if curve.id in self.host.selection and not curve.edit_mode:
                x, y, w, h = curve.page_bounds()
                p.setPen(QtGui.QPen(QtGui.QColor(30, 120, 255, 120), 0, QtCore.Qt.PenStyle.DashLine))
                p.setBrush(QtCore.Qt.BrushStyle.NoBrush)
                p.drawRect(QtCore.QRectF(x, y, w, h))
            if curve.edit_mode:
                self._paint_handles(p, curve)

        # rubber band from the last anchor while drawing
        m = self.pen.active
        if isinstance(m, CreationMachine) and m.preview_point is not None and m.points:
            p.setPen(QtGui.QPen(QtGui.QColor(0, 0, 0, 90), 0, QtCore.Qt.PenStyle.DashLine))
            p.drawLine(point_to_qpoint(m.points[-1].position), point_to_qpoint(m.preview_point))
        p.end()
