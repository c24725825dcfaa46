"""
Main application window.

Assembles the drawing canvas with the wall tools toolbar and status bar.
"""

from pathlib import Path
from typing import Optional

from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import QMainWindow, QToolBar, QLabel, QFileDialog, QMessageBox

from models.drawing import DrawingModel, DrawingObject
from services import get_settings
from services.connectivity import TreeTopResult, find_tree_top
from services.drawing_file import DrawingFileManager
from services.shift_engine import ShiftOutcome
from services.wall_editor import WallEditMode
from views.drawing_canvas import DrawingCanvas


MODE_LABELS = {
    WallEditMode.IDLE: "Ready",
    WallEditMode.ADDING_WALLS: "Adding walls - drag to draw, Esc to stop",
    WallEditMode.ADDING_CORNER: "Click a wall to add a corner",
    WallEditMode.SPLITTING_WALL: "Click a wall to split it",
}


class WallToolbar(QToolBar):
    """Toolbar with the wall and measuring tools."""

    def __init__(self, parent=None):
        super().__init__("Walls", parent)
        self.setMovable(False)

        self.add_walls_action = QAction("Add Walls", self)
        self.add_walls_action.setShortcut("W")
        self.addAction(self.add_walls_action)

        self.add_corner_action = QAction("Add Corner", self)
        self.addAction(self.add_corner_action)

        self.split_wall_action = QAction("Split Wall", self)
        self.addAction(self.split_wall_action)

        self.addSeparator()

        self.measure_line_action = QAction("Measure Line", self)
        self.addAction(self.measure_line_action)

        self.measure_area_action = QAction("Measure Area", self)
        self.addAction(self.measure_area_action)

        self.addSeparator()

        self.status_label = QLabel(MODE_LABELS[WallEditMode.IDLE])
        self.status_label.setStyleSheet("color: #6B7280; font-size: 12px; padding-left: 8px;")
        self.addWidget(self.status_label)


class MainWindow(QMainWindow):
    """
    Main application window for the drawing editor.

    Layout:
    ┌──────────────────────────────────────────────┐
    │  Toolbar: [Add Walls] [Corner] [Split] ...   │
    ├──────────────────────────────────────────────┤
    │                                              │
    │                Drawing Canvas                │
    │                                              │
    ├──────────────────────────────────────────────┤
    │  Status Bar                                  │
    └──────────────────────────────────────────────┘
    """

    def __init__(self, model: Optional[DrawingModel] = None):
        super().__init__()

        self.settings_manager = get_settings()
        self.canvas = DrawingCanvas(model or DrawingModel(), self)
        self.file_manager = DrawingFileManager()

        self._setup_window()
        self._setup_menu()
        self._setup_toolbar()
        self._connect_signals()

    @property
    def model(self) -> DrawingModel:
        return self.canvas.drawing_scene.model

    def _setup_window(self):
        self._update_window_title()
        self.setMinimumSize(900, 600)
        self.resize(1200, 800)
        self.setCentralWidget(self.canvas)
        self.statusBar().showMessage("Ready")

    def _update_window_title(self):
        base_title = "HVAC Draw"
        current = self.file_manager.current_file
        if current:
            self.setWindowTitle(f"{current.name} - {base_title}")
        else:
            self.setWindowTitle(f"Untitled - {base_title}")

    def _setup_menu(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")

        open_action = QAction("&Open...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self._on_open_file)
        file_menu.addAction(open_action)

        save_action = QAction("&Save As...", self)
        save_action.setShortcut(QKeySequence.StandardKey.SaveAs)
        save_action.triggered.connect(self._on_save_file_as)
        file_menu.addAction(save_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        edit_menu = menubar.addMenu("&Edit")

        delete_action = QAction("&Delete Selected", self)
        delete_action.setShortcut(QKeySequence.StandardKey.Delete)
        delete_action.triggered.connect(self._on_delete_selected)
        edit_menu.addAction(delete_action)

        make_room_action = QAction("Make &Room on Line", self)
        make_room_action.setShortcut("Ctrl+I")
        make_room_action.triggered.connect(self._on_make_room)
        edit_menu.addAction(make_room_action)

        view_menu = menubar.addMenu("&View")

        fit_action = QAction("&Fit to Contents", self)
        fit_action.setShortcut("Ctrl+0")
        fit_action.triggered.connect(self.canvas.fit_contents)
        view_menu.addAction(fit_action)

        reset_view_action = QAction("&Reset View", self)
        reset_view_action.setShortcut("Ctrl+R")
        reset_view_action.triggered.connect(self.canvas.reset_view)
        view_menu.addAction(reset_view_action)

    def _setup_toolbar(self):
        self.toolbar = WallToolbar(self)
        self.addToolBar(self.toolbar)

    def _connect_signals(self):
        editor = self.canvas.wall_editor
        self.toolbar.add_walls_action.triggered.connect(editor.start_adding_walls)
        self.toolbar.add_corner_action.triggered.connect(editor.add_corner_start)
        self.toolbar.split_wall_action.triggered.connect(editor.split_wall_start)
        self.toolbar.measure_line_action.triggered.connect(editor.add_measure_line)
        self.toolbar.measure_area_action.triggered.connect(editor.add_measure_area)
        editor.modeChanged.connect(self._on_mode_changed)
        self.canvas.itemSelected.connect(self._on_item_selected)

    def _on_mode_changed(self, mode: WallEditMode):
        self.toolbar.status_label.setText(MODE_LABELS.get(mode, mode.name))

    def _on_item_selected(self, obj: Optional[DrawingObject]):
        if obj is None:
            return
        message = f"Selected {obj.name}"
        result = TreeTopResult()
        if find_tree_top(self.canvas.drawing_scene.repo, obj, False, result):
            top = self.model.get_object(result.top_shape_id)
            if top is not None:
                message += f" (tree top {top.name})"
        self.statusBar().showMessage(message, 2000)

    def _on_delete_selected(self):
        next_id = self.canvas.drawing_scene.delete_selected()
        if next_id >= 0:
            self.statusBar().showMessage(f"Selected {next_id} after delete", 2000)

    def _on_make_room(self):
        outcome = self.canvas.drawing_scene.make_room_on_selected_line()
        if outcome == ShiftOutcome.APPLIED:
            self.statusBar().showMessage("Shifted connected shapes", 2000)
        elif outcome == ShiftOutcome.REJECTED:
            self.statusBar().showMessage("Shift rejected, shapes would collide", 3000)
        else:
            self.statusBar().showMessage("Select a line hooked at both ends", 3000)

    def _on_open_file(self):
        filepath, _ = QFileDialog.getOpenFileName(
            self, "Open Drawing", "", "Drawing Files (*.json);;All Files (*)"
        )
        if not filepath:
            return
        model = self.file_manager.load(Path(filepath))
        if model is None:
            QMessageBox.critical(
                self, "Open Failed", f"Could not open drawing:\n{self.file_manager.last_error}"
            )
            return

        scene = self.canvas.drawing_scene
        scene.model.clear()
        scene.model.objects.update(model.objects)
        scene.model.z_order.extend(model.z_order)
        scene.rebuild()
        self.settings_manager.add_recent_file(filepath)
        self._update_window_title()
        self.statusBar().showMessage(f"Opened {self.file_manager.current_file.name}", 2000)

    def _on_save_file_as(self):
        filepath, _ = QFileDialog.getSaveFileName(
            self, "Save Drawing", "", "Drawing Files (*.json)"
        )
        if not filepath:
            return
        if not self.file_manager.save(self.model, Path(filepath)):
            QMessageBox.critical(
                self, "Save Failed", f"Could not save drawing:\n{self.file_manager.last_error}"
            )
            return
        self.settings_manager.add_recent_file(filepath)
        self._update_window_title()
        self.statusBar().showMessage(f"Saved to {self.file_manager.current_file.name}", 2000)
