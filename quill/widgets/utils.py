from typing import Sequence

from PySide6 import QtCore, QtGui

from quill.core import Modifiers, Op, Point


def qpoint_to_point(p: QtCore.QPointF) -> Point:
    return float(p.x()), float(p.y())

def point_to_qpoint(p: Point) -> QtCore.QPointF:
    return QtCore.QPointF(p[0], p[1])


def qt_modifiers(mods: QtCore.Qt.KeyboardModifier) -> Modifiers:
    return Modifiers(
        shift=bool(mods & QtCore.Qt.KeyboardModifier.ShiftModifier),
        alt=bool(mods & QtCore.Qt.KeyboardModifier.AltModifier),
        ctrl=bool(mods & QtCore.Qt.KeyboardModifier.ControlModifier),
    )


def make_qpath(ops: Sequence[Op], offset: Point = (0.0, 0.0)) -> QtGui.QPainterPath:
    """Replay path ops into a QPainterPath, shifted by `offset` (the curve origin)."""
    ox, oy = offset
    qpf = lambda t: QtCore.QPointF(t[0] + ox, t[1] + oy)
    path = QtGui.QPainterPath()
    for op, data in ops:
        match op:
            case "M":
                path.moveTo(qpf(data))
            case "L":
                path.lineTo(qpf(data))
            case "Q":
                c, p2 = data
                path.quadTo(qpf(c), qpf(p2))
            case "C":
                c1, c2, p2 = data
                path.cubicTo(qpf(c1), qpf(c2), qpf(p2))
            case "Z":
                path.closeSubpath()
            case _:
                raise ValueError(f"Unknown path op '{op}'")
    return path
