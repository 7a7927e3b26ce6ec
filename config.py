"""
Configuration file for the bubble chart renderer.
Modify this file to customize layout, font fitting and rendering behavior.
"""

# Layout configuration
LAYOUT_CONFIG = {
    "min_radius": 3,  # Radius for the lowest score
    "max_radius": 30,  # Radius for the highest score
    "viewport_size": 1980,  # Longer side of the laid-out chart, in pixels
    "step_count": 300,  # Relaxation steps
    "collision_iterations": 30,  # Collision passes per step
    "repulsion_strength": 10,  # Many-body strength (negative attracts)
    "padding": 1,  # Added to every radius when resolving collisions
    "spread": 1000,  # Initial scatter factor
    "seed": 0,  # Seed for the initial scatter and jiggle
    "center_strength": 0.1,  # Pull toward the origin on each axis
    "velocity_decay": 0.4,  # Fraction of velocity lost every step
    "alpha_min": 0.001,  # Cooling factor reached at the last step
    "collision_strength": 1.0,  # Fraction of the overlap resolved per pass
    "distance_min": 1.0,  # Lower bound on repulsion distance
}

# Font fitting configuration
FONT_CONFIG = {
    "font_family": "'Sawarabi Gothic', sans-serif",
    "font_weight": "normal",
    "min_font_size": 0,  # Lower bound of the font size search
    "max_font_size": 100,  # Upper bound of the font size search
    "search_iterations": 10,  # Binary search steps (~0.1px precision)
}

# Rendering configuration
RENDER_CONFIG = {
    "margin": 10,  # Margin around the viewport on every side
    "background": (0, 0, 0, 0),  # Transparent canvas
    "text_color": "ghostwhite",
    "palette": "tab10",  # Categorical palette for group colors
    "max_workers": 4,  # Threads used for font fitting (1 disables threading)
}

# Output configuration
OUTPUT_CONFIG = {
    "verbose": True,  # Show detailed progress information
    "timing_info": True,  # Show execution time
}
