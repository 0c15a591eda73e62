"""
Column layout search for tile lists.
"""

# Standard Library
import dataclasses
import math
import warnings

# local repo modules
import context_canvas as ccv
import context_canvas.config
import context_canvas.drawing
import context_canvas.errors
import context_canvas.tiles


DrawContext = ccv.drawing.DrawContext
Tile = ccv.tiles.Tile
LayoutError = ccv.errors.LayoutError
LayoutCostWarning = ccv.errors.LayoutCostWarning

LARGE_PANE_TILE_COUNT = ccv.config.LARGE_PANE_TILE_COUNT


@dataclasses.dataclass(eq=False)
class TileProxy:
	"""
	Tile wrapper whose size was measured once at the column width.
	"""
	tile: Tile
	width: float
	height: float

	def intrinsic_size(self, ctx: DrawContext, width: float, height: float) -> tuple[float, float]:
		return (self.width, self.height)

	def draw(self, ctx: DrawContext, width: float, height: float) -> None:
		self.tile.draw(ctx, width, height)


@dataclasses.dataclass(eq=False)
class Column:
	width: float
	row_pad: float
	tiles: list[Tile] = dataclasses.field(default_factory=list)

	def height(self, ctx: DrawContext) -> float:
		"""
		Stacked height of the column's tiles at the column width.
		"""
		if not self.tiles:
			return 0.0
		total = 0.0
		for tile in self.tiles:
			_, tile_height = tile.intrinsic_size(ctx, self.width, 0)
			total += tile_height
		return total + (len(self.tiles) - 1) * self.row_pad


@dataclasses.dataclass(eq=False)
class Shape:
	"""
	Columnar partition of a tile list.

	Columns reference the owning Pane's tiles; a Shape never copies them.
	"""
	columns: list[Column]
	col_width: float
	col_pad: float

	@property
	def col_count(self) -> int:
		return len(self.columns)

	def canvas_width(self) -> float:
		return compute_canvas_width(self.col_count, self.col_width, self.col_pad)

	def canvas_size(self, ctx: DrawContext) -> tuple[float, float]:
		height = 0.0
		for column in self.columns:
			height = max(height, column.height(ctx))
		return (self.canvas_width(), height)

	def tile_counts(self) -> list[int]:
		return [len(column.tiles) for column in self.columns]


#============================================
def build_shape(
	columns: list[list[Tile]],
	col_width: float,
	col_pad: float,
	row_pad: float,
) -> Shape:
	"""
	Build a Shape from explicit per-column tile lists.

	Args:
		columns: Tiles for each column, top to bottom.
		col_width: Column width.
		col_pad: Horizontal gap between columns.
		row_pad: Vertical gap between tiles in a column.

	Returns:
		Shape holding the given columns.
	"""
	shape_columns = [Column(col_width, row_pad, list(tiles)) for tiles in columns]
	return Shape(shape_columns, col_width, col_pad)


#============================================
def compute_canvas_width(col_count: int, col_width: float, col_pad: float) -> float:
	if col_count <= 0:
		return 0.0
	return col_count * col_width + (col_count - 1) * col_pad


#============================================
def score_canvas(width: float, height: float) -> float:
	"""
	Score a canvas footprint; lower is better.

	Area times aspect skew, so both wasted space and elongated canvases are
	penalized.

	Args:
		width: Canvas width.
		height: Canvas height.

	Returns:
		Score value.
	"""
	if width <= 0 or height <= 0:
		raise LayoutError(f"degenerate canvas {width}x{height}")
	area = width * height
	aspect = max(width / height, height / width)
	return area * aspect


#============================================
def build_proxies(ctx: DrawContext, tiles: list[Tile], col_width: float) -> list[TileProxy]:
	proxies: list[TileProxy] = []
	for tile in tiles:
		width, height = tile.intrinsic_size(ctx, col_width, 0)
		proxies.append(TileProxy(tile, width, height))
	return proxies


#============================================
def place_tiles(
	proxies: list[TileProxy],
	col_count: int,
	col_width: float,
	row_pad: float,
) -> tuple[list[Column], list[float]]:
	"""
	Greedily place tiles into the currently shortest column.

	Tiles keep their input order; ties go to the lowest column index.

	Args:
		proxies: Measured tiles.
		col_count: Number of columns.
		col_width: Column width.
		row_pad: Vertical gap between tiles.

	Returns:
		Tuple of (columns, column heights).
	"""
	columns = [Column(col_width, row_pad) for _ in range(col_count)]
	heights = [0.0] * col_count
	for proxy in proxies:
		target = 0
		for index in range(1, col_count):
			if heights[index] < heights[target]:
				target = index
		column = columns[target]
		if column.tiles:
			heights[target] += row_pad
		heights[target] += proxy.height
		column.tiles.append(proxy)
	return (columns, heights)


#============================================
def search_shape(
	ctx: DrawContext,
	tiles: list[Tile],
	col_width: float,
	col_pad: float,
	row_pad: float,
) -> tuple[Shape, tuple[float, float]]:
	"""
	Find the column count and tile placement with the lowest score.

	Every column count from 1 to len(tiles) is tried. Each try is one greedy
	pass, so the search costs O(N^2) in the tile count.

	Args:
		ctx: Drawing context for measuring tiles.
		tiles: Tiles in placement order.
		col_width: Column width.
		col_pad: Horizontal gap between columns.
		row_pad: Vertical gap between tiles.

	Returns:
		Tuple of (best shape, (canvas width, canvas height)).
	"""
	if not tiles:
		raise LayoutError("cannot lay out an empty tile list")
	if len(tiles) > LARGE_PANE_TILE_COUNT:
		warnings.warn(
			f"laying out {len(tiles)} tiles in one pane; search cost grows quadratically",
			LayoutCostWarning,
			stacklevel=2,
		)

	proxies = build_proxies(ctx, tiles, col_width)
	if all(proxy.height <= 0 for proxy in proxies):
		raise LayoutError(f"all {len(tiles)} tiles have zero height")
	best_columns: list[Column] = []
	best_size = (0.0, 0.0)
	best_score = math.inf
	for col_count in range(1, len(proxies) + 1):
		columns, heights = place_tiles(proxies, col_count, col_width, row_pad)
		width = compute_canvas_width(col_count, col_width, col_pad)
		height = max(heights)
		if height <= 0:
			raise LayoutError(f"zero canvas height for {len(tiles)} tiles at {col_count} columns")
		score = score_canvas(width, height)
		if score < best_score:
			best_score = score
			best_columns = columns
			best_size = (width, height)

	shape_columns: list[list[Tile]] = []
	for column in best_columns:
		shape_columns.append([proxy.tile for proxy in column.tiles])
	shape = build_shape(shape_columns, col_width, col_pad, row_pad)
	return (shape, best_size)
