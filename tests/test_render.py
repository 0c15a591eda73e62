import io
import json
import pathlib

import PIL.Image
import pypdf
import pytest

import context_canvas.config
import context_canvas.errors
import context_canvas.pane
import context_canvas.render
import context_canvas.tiles


Engine = context_canvas.render.Engine
Scene = context_canvas.render.Scene
RenderConfig = context_canvas.config.RenderConfig
Pane = context_canvas.pane.Pane
TextBlock = context_canvas.tiles.TextBlock
ImageBlock = context_canvas.tiles.ImageBlock

OUTER_PAD = context_canvas.config.DEFAULT_OUTER_PAD


#============================================
def build_image_scene(image_bytes, count: int) -> Scene:
	data = image_bytes(485, 485)
	tiles = [ImageBlock.from_bytes(data, f"Sample {index + 1}") for index in range(count)]
	return Scene(Pane(tiles))


#============================================
def test_hello_world_canvas() -> None:
	"""
	A single text line renders one column wide and one line tall, plus padding.
	"""
	engine = Engine(RenderConfig())
	scene = Scene(Pane([TextBlock("Hello, World!")]))
	canvas = engine.render(scene)
	font_height = engine.measurement_context().font_height()
	assert canvas.width == int(context_canvas.config.DEFAULT_COL_WIDTH + 2 * OUTER_PAD)
	assert canvas.height == int(font_height + 2 * OUTER_PAD)
	assert canvas.image.size == (canvas.width, canvas.height)
	assert canvas.result.columns == [1]
	assert canvas.result.scale == 1.0


#============================================
def test_text_is_drawn_in_foreground_color() -> None:
	engine = Engine(RenderConfig(fg_color="#000000", bg_color="#FFFFFF"))
	canvas = engine.render(Scene(Pane([TextBlock("MMMM WWWW")])))
	gray = canvas.image.convert("L")
	assert gray.getpixel((0, 0)) == 255
	assert gray.getextrema()[0] < 128


#============================================
def test_config_defaults_resolved() -> None:
	engine = Engine()
	config = engine.config
	assert config.bg_color == context_canvas.config.DEFAULT_BG_COLOR
	assert config.fg_color == context_canvas.config.DEFAULT_FG_COLOR
	assert config.font_size == 12.0
	assert config.max_canvas_width == context_canvas.config.DEFAULT_MAX_CANVAS_WIDTH
	assert config.max_canvas_height == context_canvas.config.DEFAULT_MAX_CANVAS_HEIGHT


#============================================
def test_background_color_fills_canvas() -> None:
	engine = Engine(RenderConfig(bg_color="#FF0000"))
	canvas = engine.render(Scene(Pane([TextBlock("x")])))
	assert canvas.image.getpixel((1, 1)) == (255, 0, 0)
	assert canvas.image.getpixel((canvas.width - 2, canvas.height - 2)) == (255, 0, 0)


#============================================
def test_oversized_canvas_is_scaled_uniformly(image_bytes) -> None:
	"""
	An oversized layout shrinks by one factor on both axes.
	"""
	scene = build_image_scene(image_bytes, 8)
	unbounded = Engine(RenderConfig()).render(scene)
	assert unbounded.result.scale == 1.0

	engine = Engine(RenderConfig(max_canvas_width=300, max_canvas_height=200))
	canvas = engine.render(build_image_scene(image_bytes, 8))
	result = canvas.result
	total_width = result.measured_width + 2 * OUTER_PAD
	total_height = result.measured_height + 2 * OUTER_PAD
	expected_scale = min(300 / total_width, 200 / total_height)
	assert result.scale == pytest.approx(expected_scale)
	assert canvas.width <= 300
	assert canvas.height <= 200
	assert canvas.width == int(total_width * expected_scale)
	assert canvas.height == int(total_height * expected_scale)


#============================================
def test_fit_scale() -> None:
	assert context_canvas.render.compute_fit_scale(100, 100, 200, 200) == 1.0
	assert context_canvas.render.compute_fit_scale(400, 100, 200, 200) == 0.5
	assert context_canvas.render.compute_fit_scale(400, 800, 200, 200) == 0.25


#============================================
def test_missing_font_fails_render(tmp_path: pathlib.Path) -> None:
	engine = Engine(RenderConfig(font_path=str(tmp_path / "missing.ttf")))
	with pytest.raises(context_canvas.errors.FontLoadError):
		engine.render(Scene(Pane([TextBlock("x")])))


#============================================
def test_empty_pane_fails_render() -> None:
	with pytest.raises(context_canvas.errors.LayoutError):
		Engine().render(Scene(Pane([])))


#============================================
def test_whitespace_only_text_renders_one_line() -> None:
	engine = Engine()
	canvas = engine.render(Scene(Pane([TextBlock("\n", wrap=True)])))
	font_height = engine.measurement_context().font_height()
	assert canvas.result.measured_height == pytest.approx(font_height * context_canvas.config.DEFAULT_LINE_SPACING)
	assert canvas.height == int(canvas.result.measured_height + 2 * OUTER_PAD)


#============================================
def test_cyclic_scene_fails_render() -> None:
	pane = Pane([TextBlock("loop")])
	pane.tiles.append(pane)
	with pytest.raises(context_canvas.errors.LayoutError):
		Engine().render(Scene(pane))


#============================================
def test_canvas_encodes_raster_formats(image_bytes) -> None:
	canvas = Engine().render(build_image_scene(image_bytes, 2))
	png = io.BytesIO()
	canvas.to_png(png)
	assert png.getvalue().startswith(b"\x89PNG")
	jpeg = io.BytesIO()
	canvas.to_jpeg(jpeg, quality=80)
	assert jpeg.getvalue().startswith(b"\xff\xd8")
	jpeg.seek(0)
	assert PIL.Image.open(jpeg).size == (canvas.width, canvas.height)


#============================================
def test_canvas_save_by_suffix(tmp_path: pathlib.Path) -> None:
	canvas = Engine().render(Scene(Pane([TextBlock("saved")])))
	for name in ("out.png", "out.jpg", "out.pdf"):
		path = tmp_path / name
		canvas.save(path)
		assert path.stat().st_size > 0
	with pytest.raises(context_canvas.errors.OutputFormatError):
		canvas.save(tmp_path / "out.gif")
	assert not (tmp_path / "out.gif").exists()


#============================================
def test_check_output_path(tmp_path: pathlib.Path) -> None:
	check = context_canvas.render.check_output_path
	assert check(tmp_path / "out.JPG", 1) == ".jpg"
	assert check(tmp_path / "out.pdf", 3) == ".pdf"
	assert check(tmp_path / "out.pdf", 1, force_pdf=True) == ".pdf"
	with pytest.raises(context_canvas.errors.OutputFormatError):
		check(tmp_path / "out.png", 2)
	with pytest.raises(context_canvas.errors.OutputFormatError):
		check(tmp_path / "out.png", 1, force_pdf=True)
	with pytest.raises(context_canvas.errors.OutputFormatError):
		check(tmp_path / "out", 1)


#============================================
def test_format_progress() -> None:
	width = context_canvas.config.PROGRESS_BAR_WIDTH
	assert context_canvas.render.format_progress(0, 4) == f"Scenes |{'.' * width}| 0/4"
	half = context_canvas.render.format_progress(2, 4, "b.xml")
	assert half == f"Scenes |{'#' * (width // 2)}{'.' * (width - width // 2)}| 2/4 b.xml"
	assert context_canvas.render.format_progress(9, 4).endswith("| 4/4")


#============================================
def test_canvas_pdf_page_matches_canvas() -> None:
	canvas = Engine().render(Scene(Pane([TextBlock("pdf page")])))
	buffer = io.BytesIO()
	canvas.to_pdf(buffer)
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	assert len(reader.pages) == 1
	box = reader.pages[0].mediabox
	assert float(box.width) == pytest.approx(canvas.width)
	assert float(box.height) == pytest.approx(canvas.height)


#============================================
def test_pdf_document_has_page_per_canvas(tmp_path: pathlib.Path, image_bytes) -> None:
	engine = Engine()
	scenes = [Scene(Pane([TextBlock("first")])), build_image_scene(image_bytes, 3)]
	canvases = context_canvas.render.render_scenes(engine, scenes)
	output_path = tmp_path / "document.pdf"
	pages = context_canvas.render.write_pdf_document(canvases, output_path)
	assert pages == 2
	reader = pypdf.PdfReader(str(output_path))
	assert len(reader.pages) == 2
	assert float(reader.pages[1].mediabox.width) == pytest.approx(canvases[1].width)


#============================================
def test_manifest_records_layout(tmp_path: pathlib.Path, image_bytes) -> None:
	engine = Engine()
	canvas = engine.render(build_image_scene(image_bytes, 4))
	manifest_path = tmp_path / "manifest.json"
	context_canvas.render.write_manifest(
		manifest_path,
		["scene.xml"],
		[canvas],
		tmp_path / "out.png",
		engine.config,
	)
	data = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert data["inputs"] == ["scene.xml"]
	render = data["renders"][0]
	assert render["width"] == canvas.width
	assert render["height"] == canvas.height
	assert sum(render["columns"]) == 4
	assert data["fonts"]["size"] == 12.0
