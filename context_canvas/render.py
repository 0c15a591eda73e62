"""
Composition driver, canvas export and manifest writing.
"""

# Standard Library
import dataclasses
import io
import json
import pathlib
import typing

# PIP3 modules
import PIL.Image
import pypdf
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import context_canvas as ccv
import context_canvas.config
import context_canvas.drawing
import context_canvas.errors
import context_canvas.pane


DrawContext = ccv.drawing.DrawContext
Pane = ccv.pane.Pane
RenderConfig = ccv.config.RenderConfig
RenderResult = ccv.config.RenderResult
LayoutError = ccv.errors.LayoutError
OutputFormatError = ccv.errors.OutputFormatError

DEFAULT_JPEG_QUALITY = ccv.config.DEFAULT_JPEG_QUALITY
PROGRESS_BAR_WIDTH = ccv.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = ccv.config.PROGRESS_UPDATE_EVERY
RASTER_FORMATS = ccv.config.RASTER_FORMATS
PDF_SUFFIX = ccv.config.PDF_SUFFIX


@dataclasses.dataclass
class Scene:
	main: Pane
	source_path: str | None = None


@dataclasses.dataclass
class Canvas:
	width: int
	height: int
	image: PIL.Image.Image
	result: RenderResult | None = None

	#============================================
	def to_jpeg(self, stream: typing.BinaryIO, quality: int = DEFAULT_JPEG_QUALITY) -> None:
		self.image.convert("RGB").save(stream, format="JPEG", quality=quality)

	#============================================
	def to_png(self, stream: typing.BinaryIO) -> None:
		self.image.save(stream, format="PNG")

	#============================================
	def to_pdf(self, stream: typing.BinaryIO) -> None:
		"""
		Write the canvas as a one-page PDF, one point per pixel.

		Args:
			stream: Binary output stream.
		"""
		pdf = reportlab.pdfgen.canvas.Canvas(stream, pagesize=(self.width, self.height))
		image_reader = reportlab.lib.utils.ImageReader(self.image)
		pdf.drawImage(
			image_reader,
			0,
			0,
			width=self.width,
			height=self.height,
			mask=None,
			preserveAspectRatio=False,
			anchor="sw",
		)
		pdf.showPage()
		pdf.save()

	#============================================
	def save(self, output_path: pathlib.Path, quality: int = DEFAULT_JPEG_QUALITY) -> None:
		"""
		Write the canvas, picking the format from the file suffix.

		Args:
			output_path: Output path ending in .jpg, .jpeg, .png or .pdf.
			quality: JPEG quality.
		"""
		suffix = check_output_path(output_path, 1)
		with output_path.open("wb") as handle:
			if suffix == PDF_SUFFIX:
				self.to_pdf(handle)
			elif RASTER_FORMATS[suffix] == "JPEG":
				self.to_jpeg(handle, quality)
			else:
				self.to_png(handle)


#============================================
def check_output_path(output_path: pathlib.Path, scene_count: int, force_pdf: bool = False) -> str:
	"""
	Check that an output path can hold the given number of scenes.

	Args:
		output_path: Output path.
		scene_count: Number of scenes that will be written.
		force_pdf: Output must be a PDF document.

	Returns:
		Lowercase output suffix.
	"""
	suffix = pathlib.Path(output_path).suffix.lower()
	if suffix != PDF_SUFFIX and suffix not in RASTER_FORMATS:
		known = ", ".join(sorted([PDF_SUFFIX, *RASTER_FORMATS]))
		raise OutputFormatError(f"unsupported output format {output_path}; use one of {known}")
	if suffix == PDF_SUFFIX:
		return suffix
	if force_pdf:
		raise OutputFormatError(f"PDF output requested, got {output_path}")
	if scene_count > 1:
		raise OutputFormatError(f"{scene_count} scenes need a {PDF_SUFFIX} output, got {output_path}")
	return suffix


#============================================
def compute_fit_scale(width: float, height: float, max_width: float, max_height: float) -> float:
	"""
	Compute a uniform downscale that fits a canvas within a maximum size.

	Args:
		width: Canvas width including outer padding.
		height: Canvas height including outer padding.
		max_width: Maximum output width.
		max_height: Maximum output height.

	Returns:
		Scale factor, 1.0 when the canvas already fits.
	"""
	if width <= max_width and height <= max_height:
		return 1.0
	return min(max_width / width, max_height / height)


class Engine:
	"""
	Render scenes to raster canvases.
	"""

	def __init__(self, config: RenderConfig | None = None) -> None:
		if config is None:
			config = RenderConfig()
		self.config = ccv.config.resolve_config(config)

	#============================================
	def measurement_context(self) -> DrawContext:
		return DrawContext.for_measurement(self.config.font_path, self.config.font_size)

	#============================================
	def render(self, scene: Scene, verbose: bool = False) -> Canvas:
		"""
		Measure, fit and draw a scene.

		Args:
			scene: Scene whose main pane is rendered.
			verbose: Print sizing details.

		Returns:
			Rendered Canvas.
		"""
		config = self.config
		root = scene.main
		ccv.pane.check_tree(root)

		measure_ctx = self.measurement_context()
		measured_width, measured_height = root.intrinsic_size(measure_ctx, 0, 0)
		if measured_width <= 0 or measured_height <= 0:
			raise LayoutError(f"root pane measured {measured_width}x{measured_height}")

		pad = config.outer_pad
		total_width = measured_width + 2.0 * pad
		total_height = measured_height + 2.0 * pad
		scale = compute_fit_scale(
			total_width,
			total_height,
			config.max_canvas_width,
			config.max_canvas_height,
		)
		canvas_width = max(1, min(int(total_width * scale), config.max_canvas_width))
		canvas_height = max(1, min(int(total_height * scale), config.max_canvas_height))
		if verbose:
			print(f"Measured root pane: {measured_width:.1f}x{measured_height:.1f}")
			print(f"Canvas: {canvas_width}x{canvas_height} (scale {scale:.3f})")

		ctx = DrawContext(
			canvas_width,
			canvas_height,
			font_path=config.font_path,
			font_size=config.font_size,
			bg_color=config.bg_color,
		)
		ctx.clear(config.bg_color)
		ctx.set_color(config.fg_color)
		ctx.push()
		ctx.scale(scale)
		ctx.translate(pad, pad)
		root.draw(ctx, measured_width, measured_height)
		ctx.pop()

		result = RenderResult(
			measured_width=measured_width,
			measured_height=measured_height,
			canvas_width=canvas_width,
			canvas_height=canvas_height,
			scale=scale,
			columns=root.shape(measure_ctx).tile_counts(),
		)
		return Canvas(width=canvas_width, height=canvas_height, image=ctx.image, result=result)


#============================================
def format_progress(current: int, total: int, name: str = "") -> str:
	"""
	Format one progress bar line for scene rendering.

	Args:
		current: Scenes finished so far.
		total: Scenes to render.
		name: Name of the last finished scene, if any.

	Returns:
		Progress line without a line ending.
	"""
	if total <= 0:
		return "Scenes |no scenes|"
	current = min(max(current, 0), total)
	filled = PROGRESS_BAR_WIDTH * current // total
	bar = "#" * filled + "." * (PROGRESS_BAR_WIDTH - filled)
	line = f"Scenes |{bar}| {current}/{total}"
	if name:
		line += f" {name}"
	return line


#============================================
def render_scenes(engine: Engine, scenes: list[Scene], verbose: bool = False) -> list[Canvas]:
	"""
	Render several scenes, printing a progress bar when verbose.

	Args:
		engine: Render engine.
		scenes: Scenes to render.
		verbose: Show progress.

	Returns:
		Canvases in scene order.
	"""
	canvases: list[Canvas] = []
	total = len(scenes)
	for index, scene in enumerate(scenes, start=1):
		canvases.append(engine.render(scene))
		if not verbose:
			continue
		if index % PROGRESS_UPDATE_EVERY == 0 or index == total:
			name = pathlib.Path(scene.source_path).name if scene.source_path else ""
			print(format_progress(index, total, name), end="\r" if index < total else "\n")
	return canvases


#============================================
def write_pdf_document(canvases: list[Canvas], output_path: pathlib.Path) -> int:
	"""
	Join canvases into one PDF, one page per canvas.

	Args:
		canvases: Rendered canvases.
		output_path: Output PDF path.

	Returns:
		Number of pages written.
	"""
	writer = pypdf.PdfWriter()
	for canvas in canvases:
		buffer = io.BytesIO()
		canvas.to_pdf(buffer)
		buffer.seek(0)
		reader = pypdf.PdfReader(buffer)
		writer.add_page(reader.pages[0])
	writer.write(str(output_path))
	return len(canvases)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	inputs: list[str],
	canvases: list[Canvas],
	output_path: pathlib.Path,
	config: RenderConfig,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		inputs: Scene file paths.
		canvases: Rendered canvases, in input order.
		output_path: Rendered output path.
		config: Render configuration.
	"""
	renders = []
	for source, canvas in zip(inputs, canvases):
		entry: dict[str, typing.Any] = {
			"source": source,
			"width": canvas.width,
			"height": canvas.height,
		}
		if canvas.result is not None:
			entry["measured_width"] = canvas.result.measured_width
			entry["measured_height"] = canvas.result.measured_height
			entry["scale"] = canvas.result.scale
			entry["columns"] = canvas.result.columns
		renders.append(entry)
	data = {
		"inputs": inputs,
		"output": str(output_path),
		"renders": renders,
		"config": {
			"max_canvas_width": config.max_canvas_width,
			"max_canvas_height": config.max_canvas_height,
			"fg_color": config.fg_color,
			"bg_color": config.bg_color,
			"outer_pad": config.outer_pad,
		},
		"fonts": {
			"path": config.font_path,
			"size": config.font_size,
		},
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
