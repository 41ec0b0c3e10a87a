"""Integer rectangle primitive used for margins and crop regions."""

from typing import Dict, Tuple


class Rectangle:
    """Half-open integer rectangle.

    A point ``(x, y)`` lies inside the rectangle when
    ``left <= x < right`` and ``top <= y < bottom``. The rectangle is empty
    when ``right <= left`` or ``bottom <= top``. Bounds are never normalized:
    ``left > right`` is a legal value that simply describes an empty region.

    Mutating operations (``grow``, ``grow_by``, ``intersect``, ``set``)
    change the rectangle in place and return it, so calls can be chained::

        crop = margins.clone().grow(16)
    """

    __slots__ = ("left", "top", "right", "bottom")

    def __init__(self, left: int = 0, top: int = 0, right: int = 0, bottom: int = 0):
        self.left = int(left)
        self.top = int(top)
        self.right = int(right)
        self.bottom = int(bottom)

    def is_empty(self) -> bool:
        return self.right <= self.left or self.bottom <= self.top

    def contains(self, x: int, y: int) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def width(self) -> int:
        return self.right - self.left

    def height(self) -> int:
        return self.bottom - self.top

    def grow(self, amount: int) -> "Rectangle":
        """Move all four sides outward by ``amount`` (negative shrinks)."""
        return self.grow_by(amount, amount, amount, amount)

    def grow_by(self, left: int, top: int, right: int, bottom: int) -> "Rectangle":
        """Move each side outward by its own amount (negative shrinks)."""
        self.left -= int(left)
        self.top -= int(top)
        self.right += int(right)
        self.bottom += int(bottom)
        return self

    def intersect(self, other: "Rectangle") -> "Rectangle":
        """Clip this rectangle to ``other``. The result may be empty."""
        self.left = max(self.left, other.left)
        self.top = max(self.top, other.top)
        self.right = min(self.right, other.right)
        self.bottom = min(self.bottom, other.bottom)
        return self

    def clone(self) -> "Rectangle":
        return Rectangle(self.left, self.top, self.right, self.bottom)

    def set(self, left: int, top: int, right: int, bottom: int) -> "Rectangle":
        self.left = int(left)
        self.top = int(top)
        self.right = int(right)
        self.bottom = int(bottom)
        return self

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.left, self.top, self.right, self.bottom)

    def to_dict(self) -> Dict[str, int]:
        """Bounds plus width and height, e.g. for reports."""
        return {
            "left": self.left,
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
            "width": self.width(),
            "height": self.height(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rectangle):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self) -> str:
        return f"Rectangle({self.left}, {self.top}, {self.right}, {self.bottom})"
