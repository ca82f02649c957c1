from .config import DEFAULT_THRESHOLDS, Thresholds
from .curve import (Curve, CurvePoint, insert_point, move_point, normalize, recompute_bounds,
                    remove_point, replace_points, to_path, to_svg_path, toggle_point_type)
from .errors import (CurveError, DegenerateGeometry, InvalidHandleId, InvalidPointIndex,
                     InvalidSegmentIndex, MinimumPointsViolation)
from .handles import Handle, HandleKind, HandleRole, apply_handle_move, handle_at, parse_handle_id, project_handles
from .host import Button, Host, InputState, Key, KeyEvent, Modifiers, PointerEvent, Tool
from .math import Op, Point, SegmentKind
from .store import MemoryHost, ShapeStore
