ONE_KIBIBYTE = 1024
CHUNK_SIZE = 16 * ONE_KIBIBYTE

DEFAULT_URL = "http://test-debit.free.fr/image.iso"
REQUEST_TIMEOUT_SECONDS = 3600

# Rate estimation
TICK_INTERVAL_SECONDS = 0.01
RATE_WINDOW_SECONDS = 1.0
RETENTION_SECONDS = 20.0

# Chart geometry
PIXELS_PER_SECOND = 150
PADDING = (50, 60)
RIGHT_MARGIN = 100
DEFAULT_RATE_CEILING = 1000.0 # KB/s
WINDOW_WIDTH_RATIO = 0.666
WINDOW_HEIGHT_RATIO = 0.333

FRAME_INTERVAL_SECONDS = 0.001

# Colors
BACKGROUND_COLOR = "black"
AXIS_COLOR = "white"
TEXT_COLOR = "white"
AVERAGE_COLOR = "red"
CURRENT_COLOR = "yellow"

RATE_LABEL_SIZE = 30
INFO_LABEL_SIZE = 20

FONT_CANDIDATES = ("Visitor TT2 BRK", "DejaVu Sans Mono", "Liberation Mono", "Courier New", "Courier", "Consolas", "fixed")
