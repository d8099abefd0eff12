"""Bounding box value type shared by detection and masking."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """Axis-aligned pixel rectangle with its top-left corner at (x1, y1)."""

    x1: int
    y1: int
    width: int
    height: int

    def __post_init__(self):
        if self.x1 < 0 or self.y1 < 0:
            raise ValueError(f"Rect corner must be non-negative, got ({self.x1}, {self.y1})")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Rect size must be positive, got {self.width}x{self.height}"
            )

    @classmethod
    def from_corners(cls, x_min: int, y_min: int, x_max: int, y_max: int) -> "Rect":
        """Build a rect from its top-left and bottom-right corners."""
        return cls(x_min, y_min, x_max - x_min, y_max - y_min)
