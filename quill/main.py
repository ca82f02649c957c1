import argparse
import logging
import sys

from PySide6 import QtCore, QtWidgets

from quill.core import to_path, to_svg_path
from quill.widgets import CurveCanvasWidget, ToolSelectorWidget

logger = logging.getLogger(__name__)


class MyWidget(QtWidgets.QWidget):
    def __init__(self, zoom: float = 1.0, freehand: bool = False):
        super().__init__()

        self.layout = QtWidgets.QVBoxLayout(self)
        self.top_bar = QtWidgets.QHBoxLayout()

        self.canvas = CurveCanvasWidget(zoom=zoom, freehand=freehand, parent=self)
        self.tools = ToolSelectorWidget(self)

        self.freehand = QtWidgets.QCheckBox("Freehand")
        self.freehand.setChecked(freehand)
        self.zoom = QtWidgets.QDoubleSpinBox()
        self.zoom.setRange(0.25, 8.0)
        self.zoom.setSingleStep(0.25)
        self.zoom.setValue(zoom)
        self.export = QtWidgets.QPushButton("Print SVG")

        self.top_bar.addWidget(self.tools, alignment=QtCore.Qt.AlignmentFlag.AlignLeft)
        self.top_bar.addWidget(self.freehand)
        self.top_bar.addWidget(QtWidgets.QLabel("Zoom: "))
        self.top_bar.addWidget(self.zoom)
        self.top_bar.addStretch(1)
        self.top_bar.addWidget(self.export)

        self.layout.addLayout(self.top_bar)
        self.layout.addWidget(self.canvas, 1)

        self.tools.tool_changed.connect(self.canvas.set_tool)
        self.canvas.toolChanged.connect(self.tools.set_tool)
        self.freehand.toggled.connect(self._on_freehand)
        self.zoom.valueChanged.connect(self.canvas.set_zoom)
        self.export.clicked.connect(self.print_svg)

    def _on_freehand(self, checked: bool):
        self.canvas.pen.freehand = checked

    def print_svg(self):
        for curve in self.canvas.store:
            print(f'<path transform="translate({curve.x} {curve.y})" d="{to_svg_path(to_path(curve))}"/>')


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="quill", description="Interactive Bezier curve editor")
    parser.add_argument("--verbose", "-v", action="store_true", help="log debug records")
    parser.add_argument("--zoom", type=float, default=1.0)
    parser.add_argument("--freehand", action="store_true", help="drag to sketch smoothed curves")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QtWidgets.QApplication(sys.argv[:1])
    widget = MyWidget(zoom=args.zoom, freehand=args.freehand)
    widget.resize(800, 600)
    widget.show()
    logger.debug("Window shown")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
