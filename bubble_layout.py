"""
Bubble Layout Engine
Assigns circle radii from word scores, packs the circles around the origin with a
damped force simulation and normalizes the result onto a square viewport.
"""

import math
import numbers
from typing import List, Optional, Sequence, Tuple

import numpy as np

from config import LAYOUT_CONFIG, OUTPUT_CONFIG


class Item:
    """One labeled, scored, grouped input record."""

    def __init__(
        self,
        label: str,
        score: float,
        group=None,
        x: Optional[float] = None,
        y: Optional[float] = None,
    ):
        """
        Initialize an item.

        Args:
            label: Text drawn inside the bubble
            score: Weight of the item, only its rank relative to other scores matters
            group: Opaque group identifier used for coloring
            x, y: Optional seed position in unit scale
        """
        if not isinstance(label, str) or not label:
            raise ValueError(f"Item label must be a non-empty string, got {label!r}")
        if isinstance(score, bool) or not isinstance(score, numbers.Real):
            raise ValueError(f"Score for '{label}' must be a number, got {score!r}")
        try:
            value = float(score)
        except OverflowError as e:
            raise ValueError(f"Score for '{label}' must be finite, got {score!r}") from e
        if not math.isfinite(value):
            raise ValueError(f"Score for '{label}' must be finite, got {score!r}")
        if (x is None) != (y is None):
            raise ValueError(f"Seed position for '{label}' needs both x and y")

        self.label = label
        self.score = value
        self.group = group
        self.x = None if x is None else float(x)
        self.y = None if y is None else float(y)

    def __repr__(self) -> str:
        return f"Item({self.label!r}, {self.score!r}, {self.group!r})"


class PlacedCircle:
    """An item augmented with its layout position and radius."""

    def __init__(self, item: Item, radius: float):
        self.item = item
        self.base_r = radius  # radius assigned from the score, simulation units
        self.r = radius
        self.x = 0.0
        self.y = 0.0
        self.vx = 0.0
        self.vy = 0.0
        self.font_size: Optional[float] = None
        self.color: Optional[str] = None

    @property
    def label(self) -> str:
        return self.item.label

    @property
    def score(self) -> float:
        return self.item.score

    @property
    def group(self):
        return self.item.group

    def to_dict(self) -> dict:
        """Render attributes as written to the output JSON."""
        return {
            "word": self.label,
            "score": self.score,
            "group": self.group,
            "x": self.x,
            "y": self.y,
            "r": self.r,
            "fontSize": self.font_size,
            "color": self.color,
        }

    def __repr__(self) -> str:
        return (
            f"PlacedCircle({self.label!r}, x={self.x:.2f}, y={self.y:.2f}, r={self.r:.2f})"
        )


def assign_radii(
    scores: Sequence[float], min_radius: float, max_radius: float
) -> List[float]:
    """Map scores linearly from [min score, max score] onto [min_radius, max_radius]."""
    if not scores:
        return []

    low = min(scores)
    high = max(scores)
    if low == high:
        return [(min_radius + max_radius) / 2] * len(scores)

    # Halve before subtracting when the full range overflows
    scale = 0.5 if math.isinf(high - low) else 1.0
    span = high * scale - low * scale
    return [
        min_radius + (score * scale - low * scale) / span * (max_radius - min_radius)
        for score in scores
    ]


def compute_bounds(
    circles: Sequence[PlacedCircle],
) -> Optional[Tuple[float, float, float, float]]:
    """Return (left, top, right, bottom) of the union of all circles, or None if empty."""
    if not circles:
        return None

    left = min(circle.x - circle.r for circle in circles)
    right = max(circle.x + circle.r for circle in circles)
    top = min(circle.y - circle.r for circle in circles)
    bottom = max(circle.y + circle.r for circle in circles)
    return left, top, right, bottom


def normalize_to_viewport(
    circles: Sequence[PlacedCircle], viewport_size: float
) -> float:
    """
    Scale and translate circles so their bounding box is centered on the origin
    and its longer side equals viewport_size.

    Returns:
        The scale factor applied (1.0 when there is nothing to scale)
    """
    if not viewport_size > 0:
        raise ValueError(f"viewport_size must be positive, got {viewport_size}")

    bounds = compute_bounds(circles)
    if bounds is None:
        return 1.0

    left, top, right, bottom = bounds
    width = right - left
    height = bottom - top
    content_size = max(width, height)
    if content_size <= 0:
        return 1.0

    scale = viewport_size / content_size
    center_x = left + width / 2
    center_y = top + height / 2

    for circle in circles:
        circle.x = (circle.x - center_x) * scale
        circle.y = (circle.y - center_y) * scale
        circle.r *= scale

    return scale


def count_overlaps(
    circles: Sequence[PlacedCircle], padding: float = 0.0, tolerance: float = 1e-9
) -> int:
    """Count circle pairs whose centers are closer than their radii sum plus padding."""
    if len(circles) < 2:
        return 0

    centers = np.array([(circle.x, circle.y) for circle in circles], dtype=float)
    radii = np.array([circle.r for circle in circles], dtype=float)

    deltas = centers[:, None, :] - centers[None, :, :]
    distances = np.sqrt((deltas**2).sum(axis=2))
    reach = radii[:, None] + radii[None, :] + padding
    overlapping = distances < reach * (1 - tolerance)
    return int(np.triu(overlapping, 1).sum())


class BubbleLayoutEngine:
    """Packs circles with a damped force simulation and fits them to a viewport."""

    def __init__(
        self,
        min_radius: Optional[float] = None,
        max_radius: Optional[float] = None,
        viewport_size: Optional[float] = None,
        step_count: Optional[int] = None,
        collision_iterations: Optional[int] = None,
        repulsion_strength: Optional[float] = None,
        seed: Optional[int] = None,
        **simulation_options,
    ):
        """
        Initialize the layout engine. Options left as None use LAYOUT_CONFIG.

        Args:
            min_radius: Radius for the lowest score
            max_radius: Radius for the highest score
            viewport_size: Longer side of the normalized layout
            step_count: Number of relaxation steps
            collision_iterations: Collision passes per relaxation step
            repulsion_strength: Many-body strength, negative values attract
            seed: Seed for the initial scatter
            **simulation_options: Any other LAYOUT_CONFIG key (padding, spread,
                center_strength, velocity_decay, alpha_min, collision_strength,
                distance_min)
        """
        unknown = set(simulation_options) - set(LAYOUT_CONFIG)
        if unknown:
            raise ValueError(f"Unknown layout options: {sorted(unknown)}")

        settings = dict(LAYOUT_CONFIG)
        settings.update(
            (key, value)
            for key, value in dict(
                min_radius=min_radius,
                max_radius=max_radius,
                viewport_size=viewport_size,
                step_count=step_count,
                collision_iterations=collision_iterations,
                repulsion_strength=repulsion_strength,
                seed=seed,
                **simulation_options,
            ).items()
            if value is not None
        )

        self.min_radius = settings["min_radius"]
        self.max_radius = settings["max_radius"]
        self.viewport_size = settings["viewport_size"]
        self.step_count = settings["step_count"]
        self.collision_iterations = settings["collision_iterations"]
        self.repulsion_strength = settings["repulsion_strength"]
        self.padding = settings["padding"]
        self.spread = settings["spread"]
        self.seed = settings["seed"]
        self.center_strength = settings["center_strength"]
        self.velocity_decay = settings["velocity_decay"]
        self.alpha_min = settings["alpha_min"]
        self.collision_strength = settings["collision_strength"]
        self.distance_min = settings["distance_min"]

        self._validate()

    def _validate(self) -> None:
        """Reject configurations the simulation cannot run with."""
        if not self.viewport_size > 0:
            raise ValueError(f"viewport_size must be positive, got {self.viewport_size}")
        if not self.min_radius > 0:
            raise ValueError(f"min_radius must be positive, got {self.min_radius}")
        if not self.max_radius >= self.min_radius:
            raise ValueError(
                f"max_radius ({self.max_radius}) must be >= min_radius ({self.min_radius})"
            )
        for name in ("step_count", "collision_iterations"):
            value = getattr(self, name)
            if (
                isinstance(value, bool)
                or not isinstance(value, numbers.Integral)
                or value <= 0
            ):
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not math.isfinite(self.repulsion_strength):
            raise ValueError(
                f"repulsion_strength must be finite, got {self.repulsion_strength}"
            )
        if not self.padding >= 0:
            raise ValueError(f"padding must be >= 0, got {self.padding}")
        if not self.spread > 0:
            raise ValueError(f"spread must be positive, got {self.spread}")
        if not 0 <= self.velocity_decay <= 1:
            raise ValueError(
                f"velocity_decay must be within [0, 1], got {self.velocity_decay}"
            )
        if not 0 < self.alpha_min < 1:
            raise ValueError(f"alpha_min must be within (0, 1), got {self.alpha_min}")
        if not self.collision_strength >= 0:
            raise ValueError(
                f"collision_strength must be >= 0, got {self.collision_strength}"
            )
        if not self.distance_min > 0:
            raise ValueError(f"distance_min must be positive, got {self.distance_min}")

    def layout(self, items: Sequence[Item]) -> List[PlacedCircle]:
        """
        Place every item as a circle inside the viewport.

        Args:
            items: Items to lay out, in any order

        Returns:
            One PlacedCircle per item, in input order, centered on (0, 0)
        """
        items = list(items)
        radii = assign_radii(
            [item.score for item in items], self.min_radius, self.max_radius
        )
        circles = [PlacedCircle(item, radius) for item, radius in zip(items, radii)]

        if len(circles) > 1:
            self.relax(circles)

        normalize_to_viewport(circles, self.viewport_size)
        return circles

    def relax(self, circles: Sequence[PlacedCircle]) -> None:
        """Run the fixed relaxation budget and write final positions back to circles."""
        rng = np.random.default_rng(self.seed)
        positions = self._seed_positions(circles, rng)
        velocities = np.zeros_like(positions)

        collision_radii = np.array([circle.r for circle in circles]) + self.padding
        reach = collision_radii[:, None] + collision_radii[None, :]
        squared = collision_radii**2
        share = squared[None, :] / (squared[:, None] + squared[None, :])

        alpha = 1.0
        alpha_decay = 1 - self.alpha_min ** (1 / self.step_count)

        for _ in range(self.step_count):
            alpha -= alpha * alpha_decay

            self._apply_centering(positions, velocities, alpha)
            self._apply_repulsion(positions, velocities, alpha, rng)
            for _ in range(self.collision_iterations):
                if not self._apply_collisions(positions, velocities, reach, share, rng):
                    break

            velocities *= 1 - self.velocity_decay
            positions += velocities

        for circle, (x, y), (vx, vy) in zip(circles, positions, velocities):
            circle.x, circle.y = float(x), float(y)
            circle.vx, circle.vy = float(vx), float(vy)

        overlaps = count_overlaps(circles)
        if overlaps and OUTPUT_CONFIG["verbose"]:
            print(
                f"WARNING: {overlaps} overlapping bubble pairs remain after {self.step_count} steps"
            )

    def _seed_positions(
        self, circles: Sequence[PlacedCircle], rng: np.random.Generator
    ) -> np.ndarray:
        """Scatter circles over a wide area, honoring seed positions from the items."""
        positions = rng.uniform(-1.0, 1.0, size=(len(circles), 2))
        for index, circle in enumerate(circles):
            if circle.item.x is not None:
                positions[index] = (circle.item.x, circle.item.y)
        return positions * self.spread

    @staticmethod
    def _pair_offsets(
        points: np.ndarray, rng: np.random.Generator
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Offsets p_i - p_j for every pair; coincident points get a tiny jiggle."""
        dx = points[:, None, 0] - points[None, :, 0]
        dy = points[:, None, 1] - points[None, :, 1]

        coincident = (dx == 0) & (dy == 0)
        np.fill_diagonal(coincident, False)
        if coincident.any():
            jiggle = np.triu(rng.uniform(-0.5, 0.5, size=dx.shape) * 1e-6, 1)
            dx = np.where(coincident, jiggle - jiggle.T, dx)

        return dx, dy

    def _apply_centering(
        self, positions: np.ndarray, velocities: np.ndarray, alpha: float
    ) -> None:
        velocities -= positions * (self.center_strength * alpha)

    def _apply_repulsion(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        alpha: float,
        rng: np.random.Generator,
    ) -> None:
        """Push every pair apart with a force falling off with distance."""
        if self.repulsion_strength == 0:
            return

        dx, dy = self._pair_offsets(positions, rng)
        squared_distance = np.maximum(dx * dx + dy * dy, self.distance_min**2)
        weight = self.repulsion_strength * alpha / squared_distance
        np.fill_diagonal(weight, 0.0)

        velocities[:, 0] += (dx * weight).sum(axis=1)
        velocities[:, 1] += (dy * weight).sum(axis=1)

    def _apply_collisions(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        reach: np.ndarray,
        share: np.ndarray,
        rng: np.random.Generator,
    ) -> bool:
        """
        Resolve overlaps between predicted positions (position + velocity).

        Each overlapping pair is pushed apart along the line between centers in
        proportion to the overlap, the smaller circle taking the larger share.

        Returns:
            True if any pair overlapped
        """
        dx, dy = self._pair_offsets(positions + velocities, rng)
        squared_distance = dx * dx + dy * dy

        overlapping = squared_distance < reach * reach
        np.fill_diagonal(overlapping, False)
        if not overlapping.any():
            return False

        distance = np.sqrt(np.where(overlapping, squared_distance, 1.0))
        push = np.where(
            overlapping, (reach - distance) / distance * self.collision_strength, 0.0
        )
        factor = push * share

        velocities[:, 0] += (dx * factor).sum(axis=1)
        velocities[:, 1] += (dy * factor).sum(axis=1)
        return True
