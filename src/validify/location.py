"""Field locations for validation errors.

A location is the path from the record root to the value that failed a rule.
Segments are field names (str) or collection indices (int) and render as
``/tags[0]/name``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    """Ordered path segments from the record root."""
    segments: tuple[str | int, ...] = ()

    def field(self, name: str) -> "Location":
        """Location extended by a trailing field name."""
        return Location(self.segments + (name,))

    def index(self, position: int) -> "Location":
        """Location extended by a trailing collection index."""
        if position < 0:
            raise ValueError(f"collection index must be non-negative, got {position}")
        return Location(self.segments + (position,))

    def within(self, *segments: str | int) -> "Location":
        """Location re-rooted under the given parent segments."""
        return Location(tuple(segments) + self.segments)

    @property
    def is_root(self) -> bool:
        return not self.segments

    def render(self, separator: str = "/") -> str:
        parts = []
        for segment in self.segments:
            if isinstance(segment, int):
                parts.append(f"[{segment}]")
            else:
                parts.append(f"{separator}{segment}")
        return "".join(parts)

    def __str__(self) -> str:
        return self.render()
