"""
Glyph fitting for bubble labels.
Finds the largest font size whose label fits inside a circle. Text is measured
with Pillow; font families resolve through registered font files first and then
through matplotlib's font manager.
"""

import math
import threading
from typing import Callable, Dict, List, Optional, Tuple

from PIL import ImageFont
from matplotlib import font_manager

from config import FONT_CONFIG

# measure_width(text, font_size, font_family, font_weight) -> rendered width
MeasureWidth = Callable[[str, float, str, str], float]


def split_font_family(font_family: str) -> List[str]:
    """Split a CSS-style family list such as "'Sawarabi Gothic', sans-serif"."""
    names = []
    for part in font_family.split(","):
        name = part.strip().strip("'\"").strip()
        if name:
            names.append(name)
    return names


def label_fits(label_width: float, font_size: float, radius: float) -> bool:
    """Check whether a label's bounding diagonal fits inside a circle."""
    return math.hypot(label_width, font_size) / 2 <= radius


def find_optimal_font_size(
    label: str,
    radius: float,
    measure_width: MeasureWidth,
    font_family: Optional[str] = None,
    font_weight: Optional[str] = None,
    min_font_size: Optional[float] = None,
    max_font_size: Optional[float] = None,
    iterations: Optional[int] = None,
) -> float:
    """
    Binary search for the largest font size whose label fits inside the circle.

    Args:
        label: Text to fit
        radius: Circle radius, in the same units as the measured width
        measure_width: Text measurement function
        font_family: Font family passed to measure_width
        font_weight: Font weight passed to measure_width
        min_font_size: Lower bound of the search (always considered feasible)
        max_font_size: Upper bound of the search
        iterations: Number of halving steps

    Returns:
        The last feasible font size, min_font_size if nothing larger fits
    """
    font_family = font_family or FONT_CONFIG["font_family"]
    font_weight = font_weight or FONT_CONFIG["font_weight"]
    ok = FONT_CONFIG["min_font_size"] if min_font_size is None else min_font_size
    ng = FONT_CONFIG["max_font_size"] if max_font_size is None else max_font_size
    if iterations is None:
        iterations = FONT_CONFIG["search_iterations"]

    if ok < 0 or ng < ok:
        raise ValueError(f"Invalid font size range [{ok}, {ng}]")

    for _ in range(iterations):
        middle = (ok + ng) / 2
        width = measure_width(label, middle, font_family, font_weight)
        if label_fits(width, middle, radius):
            ok = middle
        else:
            ng = middle

    return ok


class FontManager:
    """Handles font registration, lookup and text measurement."""

    def __init__(self):
        self._registered: Dict[Tuple[str, str], str] = {}
        self._path_cache: Dict[Tuple[str, str], str] = {}
        self._local = threading.local()

    def register_font(
        self, font_path: str, family: str, weight: Optional[str] = None
    ) -> None:
        """
        Register a font file under a family name.

        Raises:
            OSError: If Pillow cannot load the file
        """
        ImageFont.truetype(font_path, 10)
        weight = str(weight or "normal").lower()
        self._registered[(family.lower(), weight)] = font_path
        self._path_cache.clear()

    def resolve_font_path(self, font_family: str, font_weight: str) -> str:
        """
        Resolve a family list to a font file.

        Raises:
            ValueError: If no family in the list can be found
        """
        key = (font_family, font_weight)
        if key in self._path_cache:
            return self._path_cache[key]

        weight = str(font_weight).lower()
        for name in split_font_family(font_family):
            if path := self._find_registered(name.lower(), weight):
                break
            try:
                path = font_manager.findfont(
                    font_manager.FontProperties(family=name, weight=font_weight),
                    fallback_to_default=False,
                )
                break
            except ValueError:
                continue
        else:
            raise ValueError(f"Unknown font family: {font_family}")

        self._path_cache[key] = path
        return path

    def _find_registered(self, family: str, weight: str) -> Optional[str]:
        if (family, weight) in self._registered:
            return self._registered[(family, weight)]
        for (registered_family, _), path in self._registered.items():
            if registered_family == family:
                return path
        return None

    def get_font(self, font_size: float, font_family: str, font_weight: str):
        """Get a font of the specified size, cached per thread."""
        path = self.resolve_font_path(font_family, font_weight)
        cache = getattr(self._local, "fonts", None)
        if cache is None:
            cache = self._local.fonts = {}

        key = (path, font_size)
        if key not in cache:
            cache[key] = ImageFont.truetype(path, font_size)
        return cache[key]

    def measure_width(
        self, text: str, font_size: float, font_family: str, font_weight: str
    ) -> float:
        """Rendered width of text at the given size, in pixels."""
        if font_size <= 0:
            return 0.0
        return self.get_font(font_size, font_family, font_weight).getlength(text)

    def fit_font_size(
        self,
        label: str,
        radius: float,
        font_family: Optional[str] = None,
        font_weight: Optional[str] = None,
    ) -> float:
        """Largest font size whose label fits inside a circle of this radius."""
        return find_optimal_font_size(
            label, radius, self.measure_width, font_family, font_weight
        )
