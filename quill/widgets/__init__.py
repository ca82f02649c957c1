from .canvas import CurveCanvasWidget, QtHost
from .tools import ToolSelectorWidget
from .utils import make_qpath

__all__ = [
    "CurveCanvasWidget",
    "QtHost",
    "ToolSelectorWidget",
    "make_qpath",
]
