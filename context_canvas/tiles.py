"""
Tile contract and leaf tiles (text and captioned images).
"""

# Standard Library
import dataclasses
import io
import pathlib
import typing

# PIP3 modules
import PIL.Image

# local repo modules
import context_canvas as ccv
import context_canvas.config
import context_canvas.drawing
import context_canvas.errors


DrawContext = ccv.drawing.DrawContext
ImageDecodeError = ccv.errors.ImageDecodeError

DEFAULT_LINE_SPACING = ccv.config.DEFAULT_LINE_SPACING
DEFAULT_LABEL_PAD = ccv.config.DEFAULT_LABEL_PAD


class Tile(typing.Protocol):
	"""
	Anything a Pane can size and draw.

	A constraint of 0 on an axis means that axis is unconstrained. draw()
	renders with the top-left corner at the current origin of ctx.
	"""

	def intrinsic_size(self, ctx: DrawContext, width: float, height: float) -> tuple[float, float]:
		...

	def draw(self, ctx: DrawContext, width: float, height: float) -> None:
		...


@dataclasses.dataclass
class TextBlock:
	text: str
	wrap: bool = False
	line_spacing: float = DEFAULT_LINE_SPACING

	#============================================
	def intrinsic_size(self, ctx: DrawContext, width: float, height: float) -> tuple[float, float]:
		"""
		Measure the text block.

		Args:
			ctx: Drawing context providing the font metrics.
			width: Wrap width, or 0 for the natural multi-line extent.
			height: Ignored; text never shrinks to a height.

		Returns:
			Tuple of (width, height).
		"""
		if not self.wrap or width <= 0:
			return ctx.measure_multiline_string(self.text, self.line_spacing)
		lines = ctx.word_wrap(self.text, width)
		max_width = 0.0
		for line in lines:
			max_width = max(max_width, ctx.measure_width(line))
		total_height = len(lines) * ctx.font_height() * self.line_spacing
		return (max_width, total_height)

	#============================================
	def draw(self, ctx: DrawContext, width: float, height: float) -> None:
		"""
		Draw the text at the top-left of the allotted box.

		Wrapped text is wrapped again at the drawing width, so callers pass
		the same width used for sizing.
		"""
		if not self.wrap or width <= 0:
			ctx.draw_lines(self.text.split("\n"), 0.0, 0.0, self.line_spacing)
			return
		ctx.draw_string_wrapped(self.text, 0.0, 0.0, width, self.line_spacing)


#============================================
def decode_image(stream: typing.BinaryIO) -> PIL.Image.Image:
	"""
	Decode an image stream into pixel data.

	Args:
		stream: Binary stream with JPEG, PNG or any Pillow-readable data.

	Returns:
		Loaded PIL image.
	"""
	try:
		image = PIL.Image.open(stream)
		image.load()
	except (OSError, ValueError, PIL.Image.DecompressionBombError) as error:
		raise ImageDecodeError(f"failed to decode image: {error}") from error
	if image.width <= 0 or image.height <= 0:
		raise ImageDecodeError(f"image has no pixels: {image.size}")
	return image


@dataclasses.dataclass(eq=False)
class ImageBlock:
	image: PIL.Image.Image
	caption: TextBlock = dataclasses.field(default_factory=lambda: TextBlock("", wrap=True))
	label_pad: float = DEFAULT_LABEL_PAD

	@classmethod
	def from_stream(cls, stream: typing.BinaryIO, caption: str = "") -> "ImageBlock":
		return cls(decode_image(stream), TextBlock(caption, wrap=True))

	@classmethod
	def from_bytes(cls, data: bytes, caption: str = "") -> "ImageBlock":
		return cls.from_stream(io.BytesIO(data), caption)

	@classmethod
	def from_path(cls, path: str | pathlib.Path, caption: str = "") -> "ImageBlock":
		try:
			data = pathlib.Path(path).read_bytes()
		except OSError as error:
			raise ImageDecodeError(f"failed to read image {path}: {error}") from error
		return cls.from_bytes(data, caption)

	@property
	def native_size(self) -> tuple[int, int]:
		return self.image.size

	#============================================
	def fit_scale(self, width: float, height: float) -> float:
		"""
		Compute the image scale for a constraint box.

		Width-only and box constraints never enlarge the image; a height-only
		constraint scales to that height, up or down.

		Args:
			width: Constraint width, 0 if unconstrained.
			height: Constraint height, 0 if unconstrained.

		Returns:
			Scale factor applied to the native pixel size.
		"""
		native_width, native_height = self.native_size
		if width <= 0 and height <= 0:
			return 1.0
		if height <= 0:
			return min(1.0, width / native_width)
		if width <= 0:
			return height / native_height
		return min(width / native_width, height / native_height)

	#============================================
	def intrinsic_size(self, ctx: DrawContext, width: float, height: float) -> tuple[float, float]:
		"""
		Measure the scaled image plus its caption.

		Args:
			ctx: Drawing context for caption metrics.
			width: Constraint width, 0 if unconstrained.
			height: Constraint height, 0 if unconstrained.

		Returns:
			Tuple of (width, height) where height includes caption and label pad.
		"""
		native_width, native_height = self.native_size
		scale = self.fit_scale(width, height)
		image_width = native_width * scale
		image_height = native_height * scale
		_, caption_height = self.caption.intrinsic_size(ctx, image_width, 0)
		return (image_width, image_height + caption_height + self.label_pad)

	#============================================
	def draw(self, ctx: DrawContext, width: float, height: float) -> None:
		native_width, native_height = self.native_size
		scale = self.fit_scale(width, 0)
		image_width = native_width * scale
		image_height = native_height * scale
		ctx.draw_image(self.image, 0.0, 0.0, scale)
		ctx.push()
		ctx.translate(0.0, image_height + self.label_pad)
		self.caption.draw(ctx, image_width, max(0.0, height - image_height - self.label_pad))
		ctx.pop()
