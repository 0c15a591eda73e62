"""
Pane: a tile container that lays its children out in columns.
"""

# Standard Library
import dataclasses

# local repo modules
import context_canvas as ccv
import context_canvas.config
import context_canvas.drawing
import context_canvas.errors
import context_canvas.layout
import context_canvas.tiles


DrawContext = ccv.drawing.DrawContext
Tile = ccv.tiles.Tile
Shape = ccv.layout.Shape
LayoutError = ccv.errors.LayoutError

DEFAULT_COL_WIDTH = ccv.config.DEFAULT_COL_WIDTH
DEFAULT_COL_PAD = ccv.config.DEFAULT_COL_PAD
DEFAULT_ROW_PAD = ccv.config.DEFAULT_ROW_PAD


@dataclasses.dataclass(eq=False)
class Pane:
	"""
	Composite tile holding an ordered list of child tiles.

	The column layout is searched on first use and memoized; sizing and
	drawing both reuse it, and it depends only on col_width, never on the
	constraint passed to intrinsic_size() or draw(). A Pane may hold other
	Panes but must not contain itself. The memoized layout is plain mutable
	state, so one Pane must not be laid out from several threads at once.
	"""
	tiles: list[Tile]
	col_width: float = DEFAULT_COL_WIDTH
	col_pad: float = DEFAULT_COL_PAD
	row_pad: float = DEFAULT_ROW_PAD
	memo_shape: Shape | None = dataclasses.field(default=None, repr=False)
	explicit_layout: bool = False

	@classmethod
	def from_shape(cls, shape: Shape, row_pad: float = DEFAULT_ROW_PAD) -> "Pane":
		"""
		Build a Pane that uses a caller-built Shape verbatim.
		"""
		tiles: list[Tile] = []
		for column in shape.columns:
			tiles.extend(column.tiles)
		if shape.columns:
			row_pad = shape.columns[0].row_pad
		return cls(
			tiles,
			col_width=shape.col_width,
			col_pad=shape.col_pad,
			row_pad=row_pad,
			memo_shape=shape,
			explicit_layout=True,
		)

	@classmethod
	def from_columns(
		cls,
		columns: list[list[Tile]],
		col_width: float = DEFAULT_COL_WIDTH,
		col_pad: float = DEFAULT_COL_PAD,
		row_pad: float = DEFAULT_ROW_PAD,
	) -> "Pane":
		shape = ccv.layout.build_shape(columns, col_width, col_pad, row_pad)
		return cls.from_shape(shape, row_pad)

	@property
	def is_laid_out(self) -> bool:
		return self.memo_shape is not None

	#============================================
	def shape(self, ctx: DrawContext) -> Shape:
		"""
		Return the memoized Shape, searching for it on first use.
		"""
		if self.memo_shape is None:
			shape, _size = ccv.layout.search_shape(
				ctx,
				self.tiles,
				self.col_width,
				self.col_pad,
				self.row_pad,
			)
			self.memo_shape = shape
		return self.memo_shape

	#============================================
	def intrinsic_size(self, ctx: DrawContext, width: float, height: float) -> tuple[float, float]:
		"""
		Report the bounding box of the Pane's best column layout.

		Args:
			ctx: Drawing context for measuring children.
			width: Ignored; a Pane picks its own footprint.
			height: Ignored.

		Returns:
			Tuple of (width, height).
		"""
		if self.memo_shape is not None:
			return self.memo_shape.canvas_size(ctx)
		shape, size = ccv.layout.search_shape(
			ctx,
			self.tiles,
			self.col_width,
			self.col_pad,
			self.row_pad,
		)
		self.memo_shape = shape
		return size

	#============================================
	def draw(self, ctx: DrawContext, width: float, height: float) -> None:
		"""
		Draw every column left to right, tiles top to bottom.
		"""
		shape = self.shape(ctx)
		step = shape.col_width + shape.col_pad
		for index, column in enumerate(shape.columns):
			ctx.push()
			ctx.translate(index * step, 0.0)
			for tile in column.tiles:
				_, tile_height = tile.intrinsic_size(ctx, column.width, 0)
				tile.draw(ctx, column.width, tile_height)
				ctx.translate(0.0, tile_height + column.row_pad)
			ctx.pop()


#============================================
def child_tiles(pane: Pane) -> list[Tile]:
	if pane.memo_shape is not None and pane.explicit_layout:
		tiles: list[Tile] = []
		for column in pane.memo_shape.columns:
			tiles.extend(column.tiles)
		return tiles
	return list(pane.tiles)


#============================================
def check_tree(root: Pane) -> None:
	"""
	Verify the tile tree under root has no cycles.

	Args:
		root: Root pane.
	"""
	path: set[int] = set()

	def visit(pane: Pane) -> None:
		if id(pane) in path:
			raise LayoutError("pane contains itself; tile containment must be a tree")
		path.add(id(pane))
		for tile in child_tiles(pane):
			if isinstance(tile, Pane):
				visit(tile)
		path.discard(id(pane))

	visit(root)


#============================================
def count_tiles(root: Pane) -> tuple[int, int]:
	"""
	Count leaf tiles and panes under root, root included.

	Args:
		root: Root pane (assumed acyclic).

	Returns:
		Tuple of (leaf_count, pane_count).
	"""
	leaves = 0
	panes = 1
	for tile in child_tiles(root):
		if isinstance(tile, Pane):
			child_leaves, child_panes = count_tiles(tile)
			leaves += child_leaves
			panes += child_panes
			continue
		leaves += 1
	return (leaves, panes)
