"""Tiny RGB565 image classifier with frame processing, panel, font and camera helpers."""

__version__ = "0.1.0"
__all__ = ["camera", "display", "model", "pipeline", "text"]