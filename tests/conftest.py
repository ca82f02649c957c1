"""
Shared fixtures for the curve editor tests.

Provides a headless host, curve builders and small input helpers.
"""
import pytest

from quill.core import Curve, CurvePoint, MemoryHost, Modifiers, PointerEvent, Tool, normalize


def corners(*coords) -> tuple[CurvePoint, ...]:
    return tuple(CurvePoint((float(x), float(y))) for x, y in coords)


def make_curve(*coords, closed=False, shape_id="curve:test", **changes) -> Curve:
    return normalize(Curve(id=shape_id, points=corners(*coords), is_closed=closed, **changes))


def down(x, y, **mods) -> PointerEvent:
    return PointerEvent((float(x), float(y)), modifiers=Modifiers(**mods))


@pytest.fixture
def host():
    return MemoryHost()


@pytest.fixture
def pen_host():
    return MemoryHost(tool=Tool.PEN)


@pytest.fixture
def elbow():
    """Open corner curve (0,0) -> (100,0) -> (100,100)."""
    return make_curve((0, 0), (100, 0), (100, 100))


@pytest.fixture
def editing_host(host, elbow):
    host.create_shape(elbow)
    return host
