"""Views package."""

from .drawing_canvas import (
    DrawingCanvas,
    DrawingScene,
    DrawingObjectItem,
)
from .main_window import MainWindow

__all__ = [
    "DrawingCanvas",
    "DrawingScene",
    "DrawingObjectItem",
    "MainWindow",
]
