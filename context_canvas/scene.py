"""
Scene XML parsing.
"""

# Standard Library
import pathlib
import xml.etree.ElementTree as StdElementTree

# PIP3 modules
import defusedxml
import defusedxml.ElementTree as ElementTree

# local repo modules
import context_canvas as ccv
import context_canvas.config
import context_canvas.errors
import context_canvas.pane
import context_canvas.render
import context_canvas.tiles


Pane = ccv.pane.Pane
Scene = ccv.render.Scene
TextBlock = ccv.tiles.TextBlock
ImageBlock = ccv.tiles.ImageBlock
SceneFormatError = ccv.errors.SceneFormatError

DEFAULT_COL_WIDTH = ccv.config.DEFAULT_COL_WIDTH
DEFAULT_COL_PAD = ccv.config.DEFAULT_COL_PAD
DEFAULT_ROW_PAD = ccv.config.DEFAULT_ROW_PAD

TILE_TAGS = ("text", "image", "pane")


#============================================
def local_tag(element: StdElementTree.Element) -> str:
	"""
	Strip any XML namespace from an element tag.
	"""
	return element.tag.rsplit("}", 1)[-1]


#============================================
def parse_px_value(value: str | None, default_value: float) -> float:
	"""
	Parse a pixel string into a float.

	Args:
		value: String value like "300" or "300px".
		default_value: Fallback when the attribute is missing.

	Returns:
		Parsed float value.
	"""
	if value is None:
		return default_value
	value = value.strip()
	if not value:
		return default_value
	if value.endswith("px"):
		value = value[:-2]
	try:
		parsed = float(value)
	except ValueError as error:
		raise SceneFormatError(f"invalid size value: {value!r}") from error
	if parsed < 0:
		raise SceneFormatError(f"negative size value: {value!r}")
	return parsed


#============================================
def parse_bool(value: str | None, default_value: bool) -> bool:
	if value is None:
		return default_value
	normalized = value.strip().lower()
	if normalized in ("1", "true", "yes", "on"):
		return True
	if normalized in ("0", "false", "no", "off"):
		return False
	raise SceneFormatError(f"invalid boolean value: {value!r}")


#============================================
def element_text(element: StdElementTree.Element) -> str:
	"""
	Collect an element's text with surrounding blank lines and indentation
	removed from each line.
	"""
	raw = "".join(element.itertext())
	lines = [line.strip() for line in raw.strip().splitlines()]
	return "\n".join(lines)


#============================================
def parse_text_element(element: StdElementTree.Element) -> TextBlock:
	wrap = parse_bool(element.get("wrap"), False)
	return TextBlock(element_text(element), wrap=wrap)


#============================================
def parse_image_element(element: StdElementTree.Element, base_dir: pathlib.Path) -> ImageBlock:
	"""
	Parse an image element and decode its source file.

	Args:
		element: XML element.
		base_dir: Directory that relative src paths resolve against.

	Returns:
		ImageBlock with its caption.
	"""
	src = element.get("src")
	if not src:
		raise SceneFormatError("image element without src attribute")
	path = pathlib.Path(src).expanduser()
	if not path.is_absolute():
		path = base_dir / path
	caption = element.get("caption")
	if caption is None:
		caption = element_text(element)
	return ImageBlock.from_path(path, caption)


#============================================
def parse_tile_element(element: StdElementTree.Element, base_dir: pathlib.Path) -> ccv.tiles.Tile:
	tag = local_tag(element)
	if tag == "text":
		return parse_text_element(element)
	if tag == "image":
		return parse_image_element(element, base_dir)
	if tag == "pane":
		return parse_pane_element(element, base_dir)
	raise SceneFormatError(f"unexpected element <{tag}>; expected one of {TILE_TAGS}")


#============================================
def parse_pane_element(element: StdElementTree.Element, base_dir: pathlib.Path) -> Pane:
	"""
	Parse a pane element into a Pane.

	A pane whose children are all <column> elements keeps that column layout
	verbatim instead of searching for one.

	Args:
		element: XML element.
		base_dir: Directory for relative image paths.

	Returns:
		Pane instance.
	"""
	col_width = parse_px_value(element.get("col-width"), DEFAULT_COL_WIDTH)
	col_pad = parse_px_value(element.get("col-pad"), DEFAULT_COL_PAD)
	row_pad = parse_px_value(element.get("row-pad"), DEFAULT_ROW_PAD)
	if col_width <= 0:
		raise SceneFormatError("pane col-width must be positive")

	children = list(element)
	if not children:
		raise SceneFormatError("pane element has no tiles")
	column_children = [child for child in children if local_tag(child) == "column"]
	if column_children and len(column_children) != len(children):
		raise SceneFormatError("pane mixes <column> elements with tiles")

	if column_children:
		columns: list[list[ccv.tiles.Tile]] = []
		for column in column_children:
			columns.append([parse_tile_element(child, base_dir) for child in column])
		return Pane.from_columns(columns, col_width=col_width, col_pad=col_pad, row_pad=row_pad)

	tiles = [parse_tile_element(child, base_dir) for child in children]
	return Pane(tiles, col_width=col_width, col_pad=col_pad, row_pad=row_pad)


#============================================
def parse_scene_xml(scene_xml: bytes, base_dir: pathlib.Path) -> Scene:
	"""
	Parse scene XML bytes.

	Args:
		scene_xml: XML document.
		base_dir: Directory for relative image paths.

	Returns:
		Scene instance.
	"""
	try:
		root = ElementTree.fromstring(scene_xml)
	except (StdElementTree.ParseError, defusedxml.DefusedXmlException) as error:
		raise SceneFormatError(f"invalid scene XML: {error}") from error
	if local_tag(root) == "pane":
		return Scene(parse_pane_element(root, base_dir))
	if local_tag(root) != "scene":
		raise SceneFormatError(f"unexpected root element <{local_tag(root)}>")
	panes = [child for child in root if local_tag(child) == "pane"]
	if len(panes) != 1 or len(root) != 1:
		raise SceneFormatError("scene must contain exactly one <pane>")
	return Scene(parse_pane_element(panes[0], base_dir))


#============================================
def load_scene(path: str | pathlib.Path) -> Scene:
	"""
	Load a scene description file.

	Args:
		path: Scene XML path.

	Returns:
		Scene with its source path recorded.
	"""
	scene_path = pathlib.Path(path).expanduser()
	scene = parse_scene_xml(scene_path.read_bytes(), scene_path.parent)
	scene.source_path = str(scene_path)
	return scene


#============================================
def gather_scene_paths(inputs: list[str]) -> list[pathlib.Path]:
	"""
	Resolve command line inputs to scene files.

	Directories contribute every *.xml below them in path order. A path
	named twice is kept once, at its first position.

	Args:
		inputs: Scene files or directories.

	Returns:
		Resolved scene paths.
	"""
	paths: list[pathlib.Path] = []
	seen: set[pathlib.Path] = set()
	for entry in inputs:
		path = pathlib.Path(entry).expanduser().resolve()
		if path.is_dir():
			found = sorted(path.rglob("*.xml"))
		elif path.is_file():
			found = [path]
		else:
			raise SceneFormatError(f"scene input not found: {entry}")
		for scene_path in found:
			if scene_path in seen:
				continue
			seen.add(scene_path)
			paths.append(scene_path)
	return paths
