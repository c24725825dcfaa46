"""
Drawing file manager for saving and loading drawings.

Drawings are stored as the JSON produced by DrawingModel.to_dict().
"""

import json
import logging
from pathlib import Path
from typing import Optional

from models.drawing import DrawingModel

logger = logging.getLogger(__name__)


# Errors a malformed or unreadable drawing file can raise while loading
LOAD_ERRORS = (OSError, ValueError, KeyError, TypeError, AttributeError)


class DrawingFileManager:
    """Handles saving and loading drawing files."""

    def __init__(self):
        self._current_file: Optional[Path] = None
        self._last_error: str = ""

    @property
    def current_file(self) -> Optional[Path]:
        """Get the current drawing file path."""
        return self._current_file

    @property
    def last_error(self) -> str:
        """Message of the most recent failed save or load."""
        return self._last_error

    def save(self, model: DrawingModel, filepath: Path) -> bool:
        """
        Save a drawing to a JSON file.

        Returns:
            True if successful, False otherwise
        """
        filepath = Path(filepath)
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(model.to_dict(), f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            self._last_error = str(e)
            logger.error(f"Error saving drawing {filepath}: {e}")
            return False

        self._current_file = filepath
        logger.info(f"Saved drawing to {filepath}")
        return True

    def load(self, filepath: Path) -> Optional[DrawingModel]:
        """
        Load a drawing from a JSON file.

        Returns:
            DrawingModel if successful, None otherwise
        """
        filepath = Path(filepath)
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            model = DrawingModel.from_dict(data)
        except LOAD_ERRORS as e:
            self._last_error = str(e) or type(e).__name__
            logger.error(f"Error loading drawing {filepath}: {e}")
            return None

        self._current_file = filepath
        logger.info(f"Loaded {len(model.objects)} objects from {filepath}")
        return model
