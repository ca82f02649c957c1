from .creating import CreationMachine, CreationState
from .editing import EditingMachine, EditingState, EditResult, HoverPreviewLoop
from .pen import PenTool, curve_at

__all__ = [
    "CreationMachine",
    "CreationState",
    "EditingMachine",
    "EditingState",
    "EditResult",
    "HoverPreviewLoop",
    "PenTool",
    "curve_at",
]
