from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from .curve import Curve
from .math import Point


class Tool(Enum):
    SELECT = "Select"
    PEN = "Pen"


class Button(Enum):
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"


class Key(Enum):
    ENTER = "Enter"
    ESCAPE = "Escape"
    CLOSE = "c"
    DELETE = "Delete"
    ALT = "Alt"
    OTHER = "other"


@dataclass(frozen=True)
class Modifiers:
    shift: bool = False
    alt: bool = False
    ctrl: bool = False


@dataclass(frozen=True)
class PointerEvent:
    """Pointer input in page coordinates (camera and zoom already applied)."""
    position: Point
    button: Button = Button.LEFT
    modifiers: Modifiers = field(default_factory=Modifiers)


@dataclass(frozen=True)
class KeyEvent:
    key: Key
    modifiers: Modifiers = field(default_factory=Modifiers)


@dataclass(frozen=True)
class InputState:
    """Snapshot of the host's pointer/keyboard state, polled by frame loops."""
    position: Point = (0.0, 0.0)
    modifiers: Modifiers = field(default_factory=Modifiers)
    is_pointing: bool = False
    is_dragging: bool = False


FrameCallback = Callable[[], None]


class Host(ABC):
    """
    Everything the curve tools need from the surrounding editor. Shapes are
    only ever submitted whole; the host never receives partial patches.
    """

    # ---- shape CRUD ---------------------------------------------------------
    @abstractmethod
    def create_shape(self, curve: Curve) -> None:
        """Store a new shape under `curve.id`."""

    @abstractmethod
    def get_shape(self, shape_id: str) -> Curve | None:
        """Current value of a shape, or None if it does not exist."""

    @abstractmethod
    def update_shape(self, curve: Curve) -> None:
        """Replace the stored shape with the same id."""

    @abstractmethod
    def delete_shape(self, shape_id: str) -> None:
        """Remove a shape; unknown ids are ignored."""

    @abstractmethod
    def shapes(self) -> Iterable[Curve]:
        """Every stored shape, bottom-most first."""

    # ---- view / input -------------------------------------------------------
    @abstractmethod
    def zoom(self) -> float:
        """Camera zoom factor (screen pixels per page unit)."""

    @abstractmethod
    def inputs(self) -> InputState:
        """Latest pointer and modifier state."""

    # ---- tools / selection --------------------------------------------------
    @abstractmethod
    def current_tool(self) -> Tool:
        ...

    @abstractmethod
    def set_tool(self, tool: Tool) -> None:
        ...

    @abstractmethod
    def select(self, shape_ids: Iterable[str]) -> None:
        ...

    # ---- animation frames ---------------------------------------------------
    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> int:
        """Run `callback` once on the next frame; returns a cancel handle."""

    @abstractmethod
    def cancel_frame(self, handle: int) -> None:
        ...
