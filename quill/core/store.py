import itertools
import logging
from typing import Iterable, Iterator

from .curve import Curve
from .host import FrameCallback, Host, InputState, Tool

logger = logging.getLogger(__name__)


class ShapeStore:
    """
    Arena of curves keyed by id. Values are immutable, so every write is a
    whole-shape replacement and readers never observe a half-applied edit.
    """

    def __init__(self, shapes: Iterable[Curve] = ()):
        self._shapes: dict[str, Curve] = {}
        for s in shapes:
            self.add(s)

    def add(self, curve: Curve) -> None:
        if curve.id in self._shapes:
            raise KeyError(f"Duplicate shape id '{curve.id}'")
        self._shapes[curve.id] = curve

    def get(self, shape_id: str) -> Curve | None:
        return self._shapes.get(shape_id)

    def replace(self, curve: Curve) -> None:
        if curve.id not in self._shapes:
            raise KeyError(curve.id)
        self._shapes[curve.id] = curve

    def remove(self, shape_id: str) -> bool:
        return self._shapes.pop(shape_id, None) is not None

    def __getitem__(self, shape_id: str) -> Curve:
        return self._shapes[shape_id]

    def __contains__(self, shape_id: str) -> bool:
        return shape_id in self._shapes

    def __iter__(self) -> Iterator[Curve]:
        return iter(list(self._shapes.values()))

    def __len__(self) -> int:
        return len(self._shapes)

    def to_dict(self) -> dict:
        return {"shapes": [s.to_dict() for s in self._shapes.values()]}

    @classmethod
    def from_dict(cls, data: dict) -> "ShapeStore":
        return cls(Curve.from_dict(d) for d in data.get("shapes", []))


class MemoryHost(Host):
    """
    Headless host: a ShapeStore plus explicit input state and a manual frame
    queue advanced with `run_frame()`.
    """

    def __init__(self, store: ShapeStore | None = None, zoom: float = 1.0, tool: Tool = Tool.SELECT):
        self.store = store if store is not None else ShapeStore()
        self.selection: list[str] = []
        self.state = InputState()
        self._zoom = zoom
        self._tool = tool
        self._frames: dict[int, FrameCallback] = {}
        self._frame_ids = itertools.count(1)
        self.updates = 0

    # ---- shape CRUD ---------------------------------------------------------
    def create_shape(self, curve: Curve) -> None:
        self.store.add(curve)
        self.updates += 1

    def get_shape(self, shape_id: str) -> Curve | None:
        return self.store.get(shape_id)

    def update_shape(self, curve: Curve) -> None:
        self.store.replace(curve)
        self.updates += 1

    def delete_shape(self, shape_id: str) -> None:
        if self.store.remove(shape_id):
            self.updates += 1
        self.selection = [i for i in self.selection if i != shape_id]

    def shapes(self) -> Iterable[Curve]:
        return iter(self.store)

    # ---- view / input -------------------------------------------------------
    def zoom(self) -> float:
        return self._zoom

    def set_zoom(self, zoom: float) -> None:
        self._zoom = zoom

    def inputs(self) -> InputState:
        return self.state

    # ---- tools / selection --------------------------------------------------
    def current_tool(self) -> Tool:
        return self._tool

    def set_tool(self, tool: Tool) -> None:
        logger.debug("Tool %s -> %s", self._tool, tool)
        self._tool = tool

    def select(self, shape_ids: Iterable[str]) -> None:
        self.selection = list(shape_ids)

    # ---- frames -------------------------------------------------------------
    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._frame_ids)
        self._frames[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._frames.pop(handle, None)

    @property
    def pending_frames(self) -> int:
        return len(self._frames)

    def run_frame(self) -> int:
        """Fire every callback queued before this call; returns how many ran."""
        due = self._frames
        self._frames = {}
        for cb in due.values():
            cb()
        return len(due)
