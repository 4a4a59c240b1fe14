"""Global constants for the application."""

# Export defaults
DEFAULT_FPS = 15  # Frames per second for exported animations
DEFAULT_DURATION_SECONDS = 10.0  # Length of the exported animation
DEFAULT_WIDTH = 1200  # Exported frame width in pixels
DEFAULT_HEIGHT = 800  # Exported frame height in pixels
DEFAULT_QUALITY = 10  # Palette quality level, lower is better but slower
MIN_QUALITY = 1
MAX_QUALITY = 30
DEFAULT_OUTPUT_FORMAT = "gif"
DEFAULT_FILENAME_STEM = "activity-animation"

# Capture settings
RENDER_SETTLE_SECONDS = 0.1  # Fixed deferral after a seek before sampling pixels
IDLE_POLL_INTERVAL_SECONDS = 0.01  # Poll interval for renderers exposing is_idle()
IDLE_WAIT_FACTOR = 10  # Idle polling budget, in multiples of the settle deferral

# Progress split between the capture and encode phases
CAPTURE_PHASE_WEIGHT = 0.5

# Encoder settings
DEFAULT_ENCODER_WORKERS = 2
PALETTE_COLORS = 256
MAX_KMEANS_PASSES = 3  # Palette refinement passes at the best quality level

# Map rendering
BACKGROUND_COLOR = (240, 240, 240)  # #f0f0f0
TRACK_LINE_WIDTH = 2
TRACK_OPACITY = 0.6
MAP_PADDING = 20  # Pixels kept free around fitted track bounds
CONTROLS_BAR_HEIGHT = 28
ACTIVITY_COLORS = {
    "Run": (252, 76, 2),  # #fc4c02
    "Ride": (0, 102, 204),  # #0066cc
    "Swim": (0, 204, 204),  # #00cccc
    "Walk": (102, 204, 0),  # #66cc00
    "Hike": (153, 102, 0),  # #996600
}
DEFAULT_ACTIVITY_COLOR = (136, 136, 136)  # #888888

# Polyline codec precision
POLYLINE_PRECISION = 1e5
