import secrets
from dataclasses import dataclass, field

import numpy as np

from config import DEFAULT_SHAPE


class TemplateError(ValueError):
    """Malformed template data. Fatal configuration error, not a user failure."""


@dataclass(frozen=True)
class Template:
    name: str
    points: np.ndarray  # (N, 2) read-only, unit reference frame

    @classmethod
    def from_points(cls, name: str, points) -> "Template":
        arr = np.array(points, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[1] != 2 or len(arr) < 2:
            raise TemplateError(f"Template {name!r} needs at least 2 (x, y) points")
        if not np.all(np.isfinite(arr)):
            raise TemplateError(f"Template {name!r} has non-finite coordinates")
        if np.allclose(arr, arr[0]):
            raise TemplateError(f"Template {name!r} has zero length")
        extent = arr.max(axis=0) - arr.min(axis=0)
        if extent[0] <= 0 or extent[1] <= 0:
            raise TemplateError(f"Template {name!r} has a zero-area bounding box")
        arr.setflags(write=False)
        return cls(name=name, points=arr)


@dataclass
class TemplateRegistry:
    templates: dict[str, Template] = field(default_factory=dict)
    default_name: str = DEFAULT_SHAPE

    def add(self, template: Template) -> None:
        self.templates[template.name] = template

    def names(self) -> list[str]:
        return sorted(self.templates)

    def get(self, name: str | None) -> Template:
        """Template by name; None (or an unknown name) gives the default."""
        if name in self.templates:
            return self.templates[name]
        if self.default_name in self.templates:
            return self.templates[self.default_name]
        return self.templates[self.names()[0]]

    def random_name(self) -> str:
        return secrets.choice(self.names())
