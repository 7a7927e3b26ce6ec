"""
Bubble Chart Visualizer
Creates bubble charts with circles sized by score, packed by the layout engine,
colored by group and labeled with the largest font that fits each circle.
"""

import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence, Tuple

import matplotlib
import matplotlib.colors as mcolors
from PIL import Image, ImageDraw

from bubble_layout import BubbleLayoutEngine, Item, PlacedCircle
from chart_data import save_layout_json
from config import FONT_CONFIG, OUTPUT_CONFIG, RENDER_CONFIG
from glyph_fitter import FontManager


class ColorManager:
    """Assigns categorical colors to groups in order of first appearance."""

    def __init__(self, palette: Optional[str] = None):
        name = palette or RENDER_CONFIG["palette"]
        colormap = matplotlib.colormaps[name]
        if not isinstance(colormap, mcolors.ListedColormap) or colormap.N > 20:
            raise ValueError(f"Palette '{name}' is not a categorical colormap")

        self.colors = [mcolors.to_hex(color) for color in colormap.colors]
        self._assigned = {}

    def reset(self) -> None:
        """Forget group assignments so the next chart starts from the first color."""
        self._assigned = {}

    def get_group_color(self, group) -> str:
        """Get the color for a group, assigning the next palette entry to new groups."""
        if group not in self._assigned:
            self._assigned[group] = self.colors[len(self._assigned) % len(self.colors)]
        return self._assigned[group]


class BubbleRenderer:
    """Handles the actual drawing of placed bubbles."""

    def __init__(
        self,
        viewport_size: float,
        font_manager: FontManager,
        margin: Optional[float] = None,
        background=None,
        text_color: Optional[str] = None,
    ):
        self.viewport_size = viewport_size
        self.font_manager = font_manager
        self.margin = RENDER_CONFIG["margin"] if margin is None else margin
        self.background = background or RENDER_CONFIG["background"]
        self.text_color = text_color or RENDER_CONFIG["text_color"]

        self.width = int(math.ceil(viewport_size + 2 * self.margin))
        self.height = self.width

    def create_image(
        self, circles: Sequence[PlacedCircle], font_family: str, font_weight: str
    ) -> Image.Image:
        """Draw every circle and its label on a fresh canvas."""
        image = Image.new("RGBA", (self.width, self.height), self.background)
        draw = ImageDraw.Draw(image)

        # Layout coordinates are centered on the viewport
        origin_x = self.margin + self.viewport_size / 2
        origin_y = self.margin + self.viewport_size / 2

        for circle in circles:
            x = origin_x + circle.x
            y = origin_y + circle.y
            self._draw_bubble(draw, circle, x, y, font_family, font_weight)

        return image

    def _draw_bubble(
        self,
        draw: ImageDraw.ImageDraw,
        circle: PlacedCircle,
        x: float,
        y: float,
        font_family: str,
        font_weight: str,
    ) -> None:
        bbox = [x - circle.r, y - circle.r, x + circle.r, y + circle.r]
        draw.ellipse(bbox, fill=circle.color)

        if circle.font_size and circle.font_size > 0:
            font = self.font_manager.get_font(circle.font_size, font_family, font_weight)
            draw.text(
                (x, y), circle.label, fill=self.text_color, font=font, anchor="mm"
            )


class BubbleVisualizer:
    """Creates bubble chart visualizations of scored words."""

    def __init__(
        self,
        layout_engine: Optional[BubbleLayoutEngine] = None,
        font_manager: Optional[FontManager] = None,
        color_manager: Optional[ColorManager] = None,
        font_family: Optional[str] = None,
        font_weight: Optional[str] = None,
        margin: Optional[float] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the visualizer.

        Args:
            layout_engine: Engine used to place circles
            font_manager: Font lookup and text measurement
            color_manager: Group color assignment
            font_family: CSS-style font family list for labels
            font_weight: Font weight for labels
            margin: Canvas margin around the viewport
            max_workers: Threads used to fit labels (1 fits them sequentially)
        """
        self.layout_engine = layout_engine or BubbleLayoutEngine()
        self.font_manager = font_manager or FontManager()
        self.color_manager = color_manager or ColorManager()
        self.font_family = font_family or FONT_CONFIG["font_family"]
        self.font_weight = font_weight or FONT_CONFIG["font_weight"]
        self.max_workers = (
            RENDER_CONFIG["max_workers"] if max_workers is None else max_workers
        )

        self.renderer = BubbleRenderer(
            self.layout_engine.viewport_size, self.font_manager, margin
        )
        self.width = self.renderer.width
        self.height = self.renderer.height

    def render_chart(
        self, items: Sequence[Item]
    ) -> Tuple[Image.Image, List[PlacedCircle]]:
        """
        Lay out, fit, color and draw a chart.

        Returns:
            The rendered image and the placed circles with font sizes and colors
        """
        items = list(items)
        if items:
            # Fail on an unknown font before spending time on the layout
            self.font_manager.resolve_font_path(self.font_family, self.font_weight)

        if OUTPUT_CONFIG["verbose"]:
            print(f"Positioning {len(items)} bubbles...")
        circles = self.layout_engine.layout(items)
        self.color_manager.reset()

        if OUTPUT_CONFIG["verbose"]:
            print("Fitting labels...")
        self.fit_labels(circles)

        for circle in circles:
            circle.color = self.color_manager.get_group_color(circle.group)

        image = self.renderer.create_image(circles, self.font_family, self.font_weight)
        return image, circles

    def fit_labels(self, circles: Sequence[PlacedCircle]) -> None:
        """Attach the largest fitting font size to every circle."""
        if self.max_workers <= 1 or len(circles) < 2:
            for circle in circles:
                circle.font_size = self._fit_label(circle)
            return

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_circle = {
                executor.submit(self._fit_label, circle): circle for circle in circles
            }
            for future in as_completed(future_to_circle):
                future_to_circle[future].font_size = future.result()

    def _fit_label(self, circle: PlacedCircle) -> float:
        return self.font_manager.fit_font_size(
            circle.label, circle.r, self.font_family, self.font_weight
        )

    def create_bubble_chart(
        self,
        items: Sequence[Item],
        output_path: str,
        json_path: Optional[str] = None,
    ) -> List[PlacedCircle]:
        """
        Create a bubble chart and save it.

        Args:
            items: Items to chart
            output_path: Path to save the PNG image
            json_path: Optional path to save the render attributes as JSON

        Returns:
            The placed circles
        """
        image, circles = self.render_chart(items)
        image.save(output_path, "PNG", optimize=True)

        if json_path:
            save_layout_json(circles, json_path)

        if OUTPUT_CONFIG["verbose"]:
            groups = len({circle.group for circle in circles})
            print(f"Bubble chart saved to: {output_path}")
            print(f"Generated {len(circles)} bubbles in {groups} groups")

        return circles
