"""
CLI entry points for rendering scene files to context images.
"""

# Standard Library
import argparse
import pathlib
import time

# local repo modules
import context_canvas as ccv
import context_canvas.config
import context_canvas.errors
import context_canvas.pane
import context_canvas.render
import context_canvas.scene


RenderConfig = ccv.config.RenderConfig

DEFAULT_FONT_SIZE = ccv.config.DEFAULT_FONT_SIZE
DEFAULT_MAX_CANVAS_WIDTH = ccv.config.DEFAULT_MAX_CANVAS_WIDTH
DEFAULT_MAX_CANVAS_HEIGHT = ccv.config.DEFAULT_MAX_CANVAS_HEIGHT
DEFAULT_OUTER_PAD = ccv.config.DEFAULT_OUTER_PAD
DEFAULT_JPEG_QUALITY = ccv.config.DEFAULT_JPEG_QUALITY


#============================================
def build_config(args: argparse.Namespace) -> RenderConfig:
	"""
	Build render config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		RenderConfig.
	"""
	return RenderConfig(
		max_canvas_width=args.max_width,
		max_canvas_height=args.max_height,
		fg_color=args.fg_color,
		bg_color=args.bg_color,
		font_size=args.font_size,
		font_path=args.font_path,
		outer_pad=args.outer_pad,
	)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, or None for sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Compose scene files of text and images into one image.")
	parser.add_argument("inputs", nargs="+", help="Scene XML files or directories.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", required=True, help="Output .jpg, .png or .pdf path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	output_group.add_argument("-q", "--quality", dest="quality", type=int, default=DEFAULT_JPEG_QUALITY, help="JPEG quality.")
	output_group.add_argument("-p", "--pdf", dest="pdf", action="store_true", help="Always write a multi-page PDF.")

	canvas_group = parser.add_argument_group("Canvas")
	canvas_group.add_argument("-W", "--max-width", dest="max_width", type=int, default=DEFAULT_MAX_CANVAS_WIDTH, help="Maximum canvas width.")
	canvas_group.add_argument("-H", "--max-height", dest="max_height", type=int, default=DEFAULT_MAX_CANVAS_HEIGHT, help="Maximum canvas height.")
	canvas_group.add_argument("-s", "--font-size", dest="font_size", type=float, default=DEFAULT_FONT_SIZE, help="Base font size.")
	canvas_group.add_argument("-f", "--font-path", dest="font_path", default=None, help="TrueType font file.")
	canvas_group.add_argument("--fg-color", dest="fg_color", default=None, help="Foreground color.")
	canvas_group.add_argument("--bg-color", dest="bg_color", default=None, help="Background color.")
	canvas_group.add_argument("--outer-pad", dest="outer_pad", type=float, default=DEFAULT_OUTER_PAD, help="Padding around the canvas.")

	parser.set_defaults(pdf=False)

	args = parser.parse_args(argv)
	return args


#============================================
def write_output(
	canvases: list[ccv.render.Canvas],
	output_path: pathlib.Path,
	force_pdf: bool,
	quality: int,
) -> int:
	"""
	Write rendered canvases to the output path.

	A single canvas follows the output suffix; several canvases (or
	force_pdf) are joined into one PDF.

	Args:
		canvases: Rendered canvases.
		output_path: Output path.
		force_pdf: Always write a PDF document.
		quality: JPEG quality.

	Returns:
		Number of pages or images written.
	"""
	ccv.render.check_output_path(output_path, len(canvases), force_pdf)
	if len(canvases) == 1 and not force_pdf:
		canvases[0].save(output_path, quality)
		return 1
	return ccv.render.write_pdf_document(canvases, output_path)


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Run the full pipeline from scene files to the output image.

	Args:
		args: Parsed argparse namespace.
	"""
	print("Context canvas pipeline")
	print(f"Output: {args.output_path}")
	if args.manifest_path:
		print(f"Manifest: {args.manifest_path}")
	print(f"Max canvas: {args.max_width}x{args.max_height}")
	print(f"Font size: {args.font_size}")
	if args.font_path:
		print(f"Font: {args.font_path}")

	paths = ccv.scene.gather_scene_paths(args.inputs)
	print(f"Scene files found: {len(paths)}")
	if not paths:
		raise ccv.errors.SceneFormatError("no scene files found")
	output_path = pathlib.Path(args.output_path)
	ccv.render.check_output_path(output_path, len(paths), args.pdf)

	start_time = time.perf_counter()
	load_start = time.perf_counter()
	scenes = [ccv.scene.load_scene(path) for path in paths]
	load_end = time.perf_counter()
	for scene in scenes:
		leaves, panes = ccv.pane.count_tiles(scene.main)
		print(f"Scene {scene.source_path}: {leaves} tiles in {panes} panes")

	config = build_config(args)
	engine = ccv.render.Engine(config)
	render_start = time.perf_counter()
	canvases = ccv.render.render_scenes(engine, scenes, verbose=True)
	render_end = time.perf_counter()
	for canvas in canvases:
		print(f"Canvas: {canvas.width}x{canvas.height}")

	written = write_output(canvases, output_path, args.pdf, args.quality)
	print(f"Pages written: {written}")

	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{output_path}.json"
	ccv.render.write_manifest(
		pathlib.Path(manifest_path),
		[str(path) for path in paths],
		canvases,
		output_path,
		engine.config,
	)

	total_time = time.perf_counter() - start_time
	print(
		"Timing: load={:.2f}s render={:.2f}s total={:.2f}s".format(
			load_end - load_start,
			render_end - render_start,
			total_time,
		)
	)
	print(f"Manifest written: {manifest_path}")


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except ccv.errors.ContextCanvasError as error:
		raise SystemExit(f"Error: {error}") from error
