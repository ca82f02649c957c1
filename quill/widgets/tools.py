from PySide6 import QtWidgets
from PySide6.QtCore import Qt, Signal

from quill.core import Tool


class ToolSelectorWidget(QtWidgets.QWidget):

    tool_changed = Signal(Tool)

    def __init__(self, parent=None):
        super().__init__(parent)

        self.select_box = QtWidgets.QComboBox()
        for tool in Tool:
            self.select_box.addItem(tool.value, tool.name)
        self.text = QtWidgets.QLabel("Tool: ")
        self.layout = QtWidgets.QHBoxLayout(self)

        self.layout.addWidget(self.text, alignment=Qt.AlignmentFlag.AlignLeft)
        self.layout.addWidget(self.select_box, alignment=Qt.AlignmentFlag.AlignLeft)

        self.select_box.currentTextChanged.connect(self._on_tool_changed)

    @property
    def tool(self) -> Tool:
        return Tool[self.select_box.currentData()]

    def set_tool(self, tool: Tool) -> None:
        """Reflect a tool change made elsewhere (e.g. after a commit) without re-emitting."""
        self.select_box.blockSignals(True)
        self.select_box.setCurrentText(tool.value)
        self.select_box.blockSignals(False)

    def _on_tool_changed(self, text: str):
        self.tool_changed.emit(Tool(text))
