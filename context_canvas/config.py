"""
Shared configuration and constants.
"""

import dataclasses


DEFAULT_COL_WIDTH = 300.0
DEFAULT_COL_PAD = 10.0
DEFAULT_ROW_PAD = 10.0
DEFAULT_OUTER_PAD = 10.0
DEFAULT_LINE_SPACING = 1.5
DEFAULT_LABEL_PAD = 3.0

DEFAULT_FONT_SIZE = 12.0
DEFAULT_FG_COLOR = "#000000"
DEFAULT_BG_COLOR = "#FFFFFF"
DEFAULT_MAX_CANVAS_WIDTH = 4096
DEFAULT_MAX_CANVAS_HEIGHT = 4096
DEFAULT_JPEG_QUALITY = 90

LARGE_PANE_TILE_COUNT = 200
PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

RASTER_FORMATS = {
	".jpg": "JPEG",
	".jpeg": "JPEG",
	".png": "PNG",
}
PDF_SUFFIX = ".pdf"


@dataclasses.dataclass
class RenderConfig:
	max_canvas_width: int = 0
	max_canvas_height: int = 0
	fg_color: str | None = None
	bg_color: str | None = None
	font_size: float = 0.0
	font_path: str | None = None
	outer_pad: float = DEFAULT_OUTER_PAD


@dataclasses.dataclass
class RenderResult:
	measured_width: float
	measured_height: float
	canvas_width: int
	canvas_height: int
	scale: float
	columns: list[int]


#============================================
def resolve_config(config: RenderConfig) -> RenderConfig:
	"""
	Fill unset render options with their defaults.

	Args:
		config: Render configuration as supplied by the caller.

	Returns:
		New RenderConfig with every option set.
	"""
	max_width = config.max_canvas_width
	if max_width <= 0:
		max_width = DEFAULT_MAX_CANVAS_WIDTH
	max_height = config.max_canvas_height
	if max_height <= 0:
		max_height = DEFAULT_MAX_CANVAS_HEIGHT
	font_size = config.font_size
	if font_size <= 0:
		font_size = DEFAULT_FONT_SIZE
	return dataclasses.replace(
		config,
		max_canvas_width=max_width,
		max_canvas_height=max_height,
		fg_color=config.fg_color or DEFAULT_FG_COLOR,
		bg_color=config.bg_color or DEFAULT_BG_COLOR,
		font_size=font_size,
		outer_pad=max(0.0, config.outer_pad),
	)
