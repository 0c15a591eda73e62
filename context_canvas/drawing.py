"""
Pillow drawing context with text metrics and a transform stack.
"""

# PIP3 modules
import PIL.Image
import PIL.ImageColor
import PIL.ImageDraw
import PIL.ImageFont

# local repo modules
import context_canvas as ccv
import context_canvas.config
import context_canvas.errors


FontLoadError = ccv.errors.FontLoadError

DEFAULT_FONT_SIZE = ccv.config.DEFAULT_FONT_SIZE
DEFAULT_LINE_SPACING = ccv.config.DEFAULT_LINE_SPACING
DEFAULT_BG_COLOR = ccv.config.DEFAULT_BG_COLOR
DEFAULT_FG_COLOR = ccv.config.DEFAULT_FG_COLOR

ALPHA_MODES = ("RGBA", "LA", "PA")


#============================================
def load_font(font_path: str | None, font_size: float) -> PIL.ImageFont.FreeTypeFont:
	"""
	Load a scalable font.

	Args:
		font_path: TrueType/OpenType file, or None for the Pillow default font.
		font_size: Font size in pixels.

	Returns:
		Pillow font object.
	"""
	if font_path is None:
		return PIL.ImageFont.load_default(size=font_size)
	try:
		return PIL.ImageFont.truetype(font_path, font_size)
	except OSError as error:
		raise FontLoadError(f"failed to load font {font_path}: {error}") from error


#============================================
def parse_color(value: str) -> tuple[int, int, int]:
	"""
	Parse a color string into an RGB tuple.

	Args:
		value: Color like "#AABBCC" or "white".

	Returns:
		Tuple of (r, g, b) in 0-255 range.
	"""
	return PIL.ImageColor.getrgb(value)[:3]


class DrawContext:
	"""
	Raster drawing target plus the text metrics used for tile sizing.

	Coordinates are in canvas pixels before the current transform. The
	transform is a uniform scale followed by a translation; push() and pop()
	save and restore it.
	"""

	def __init__(
		self,
		width: int,
		height: int,
		font_path: str | None = None,
		font_size: float = DEFAULT_FONT_SIZE,
		bg_color: str = DEFAULT_BG_COLOR,
	) -> None:
		self.width = max(1, int(width))
		self.height = max(1, int(height))
		self._image = PIL.Image.new("RGB", (self.width, self.height), parse_color(bg_color))
		self._draw = PIL.ImageDraw.Draw(self._image)
		self._color = parse_color(DEFAULT_FG_COLOR)
		self._font_path = font_path
		self._font_size = font_size
		self._font = load_font(font_path, font_size)
		self._scaled_fonts: dict[float, PIL.ImageFont.FreeTypeFont] = {}
		self._matrix = (1.0, 0.0, 0.0)
		self._stack: list[tuple[float, float, float]] = []

	@classmethod
	def for_measurement(cls, font_path: str | None = None, font_size: float = DEFAULT_FONT_SIZE) -> "DrawContext":
		"""
		Build a 1x1 context used only for text metrics.
		"""
		return cls(1, 1, font_path=font_path, font_size=font_size)

	@property
	def image(self) -> PIL.Image.Image:
		return self._image

	#============================================
	# font and metrics

	def set_font(self, font_path: str | None, font_size: float) -> None:
		self._font = load_font(font_path, font_size)
		self._font_path = font_path
		self._font_size = font_size
		self._scaled_fonts = {}

	def font_height(self) -> float:
		ascent, descent = self._font.getmetrics()
		return float(ascent + descent)

	def measure_width(self, text: str) -> float:
		return float(self._font.getlength(text))

	def measure_string(self, text: str) -> tuple[float, float]:
		return (self.measure_width(text), self.font_height())

	def measure_multiline_string(
		self,
		text: str,
		line_spacing: float = DEFAULT_LINE_SPACING,
	) -> tuple[float, float]:
		"""
		Measure text split on newlines.

		Args:
			text: Text content.
			line_spacing: Line spacing multiplier.

		Returns:
			Tuple of (width, height). The last line does not carry the extra
			spacing below it.
		"""
		lines = text.split("\n")
		font_height = self.font_height()
		width = max(self.measure_width(line) for line in lines)
		height = len(lines) * font_height * line_spacing - (line_spacing - 1.0) * font_height
		return (width, height)

	def word_wrap(self, text: str, max_width: float) -> list[str]:
		"""
		Wrap text to fit within a max width.

		Newlines force a break and empty lines are dropped. A line holding
		only whitespace becomes one empty line, and non-empty text always
		yields at least one line. Words wider than max_width are split
		between characters.

		Args:
			text: Input text.
			max_width: Maximum line width in pixels.

		Returns:
			Wrapped lines.
		"""
		lines: list[str] = []
		for paragraph in text.split("\n"):
			words = paragraph.split()
			if paragraph and not words:
				lines.append("")
				continue
			current = ""
			for word in words:
				candidate = word if not current else f"{current} {word}"
				if self.measure_width(candidate) <= max_width:
					current = candidate
					continue
				if current:
					lines.append(current)
					current = ""
				if self.measure_width(word) <= max_width:
					current = word
					continue
				pieces = self._split_word(word, max_width)
				lines.extend(pieces[:-1])
				current = pieces[-1]
			if current:
				lines.append(current)
		if text and not lines:
			lines.append("")
		return lines

	def _split_word(self, word: str, max_width: float) -> list[str]:
		pieces: list[str] = []
		current = ""
		for char in word:
			candidate = current + char
			if current and self.measure_width(candidate) > max_width:
				pieces.append(current)
				current = char
				continue
			current = candidate
		pieces.append(current)
		return pieces

	def _scaled_font(self) -> PIL.ImageFont.FreeTypeFont:
		size = round(self._font_size * self._matrix[0], 2)
		if size == self._font_size:
			return self._font
		font = self._scaled_fonts.get(size)
		if font is None:
			font = load_font(self._font_path, max(size, 1.0))
			self._scaled_fonts[size] = font
		return font

	#============================================
	# transform stack

	def push(self) -> None:
		self._stack.append(self._matrix)

	def pop(self) -> None:
		if not self._stack:
			raise RuntimeError("DrawContext.pop() without matching push()")
		self._matrix = self._stack.pop()

	def translate(self, dx: float, dy: float) -> None:
		scale, tx, ty = self._matrix
		self._matrix = (scale, tx + scale * dx, ty + scale * dy)

	def scale(self, factor: float) -> None:
		scale, tx, ty = self._matrix
		self._matrix = (scale * factor, tx, ty)

	def transform_point(self, x: float, y: float) -> tuple[float, float]:
		scale, tx, ty = self._matrix
		return (tx + scale * x, ty + scale * y)

	#============================================
	# drawing

	def clear(self, color: str) -> None:
		self._draw.rectangle((0, 0, self.width, self.height), fill=parse_color(color))

	def set_color(self, color: str) -> None:
		self._color = parse_color(color)

	def draw_string_anchored(self, text: str, x: float, y: float, ax: float = 0.0, ay: float = 0.0) -> None:
		"""
		Draw one line of text anchored at (x, y).

		Args:
			text: Single line of text.
			x: Anchor x position.
			y: Anchor y position.
			ax: Horizontal anchor as a fraction of the text width (0 = left).
			ay: Vertical anchor as a fraction of the text height (0 = top).
		"""
		width, height = self.measure_string(text)
		left, top = self.transform_point(x - ax * width, y - ay * height)
		self._draw.text((left, top), text, fill=self._color, font=self._scaled_font(), anchor="la")

	def draw_lines(
		self,
		lines: list[str],
		x: float,
		y: float,
		line_spacing: float = DEFAULT_LINE_SPACING,
	) -> None:
		step = self.font_height() * line_spacing
		for index, line in enumerate(lines):
			self.draw_string_anchored(line, x, y + index * step)

	def draw_string_wrapped(
		self,
		text: str,
		x: float,
		y: float,
		max_width: float,
		line_spacing: float = DEFAULT_LINE_SPACING,
	) -> None:
		self.draw_lines(self.word_wrap(text, max_width), x, y, line_spacing)

	def draw_image(self, image: PIL.Image.Image, x: float, y: float, scale: float = 1.0) -> None:
		"""
		Paste an image with its top-left corner at (x, y).

		Args:
			image: Source image.
			x: Left position.
			y: Top position.
			scale: Image scale, applied on top of the current transform.
		"""
		effective = scale * self._matrix[0]
		target_size = (
			max(1, int(round(image.width * effective))),
			max(1, int(round(image.height * effective))),
		)
		has_alpha = image.mode in ALPHA_MODES or "transparency" in image.info
		image = image.convert("RGBA" if has_alpha else "RGB")
		if target_size != image.size:
			image = image.resize(target_size, PIL.Image.Resampling.LANCZOS)
		left, top = self.transform_point(x, y)
		position = (int(round(left)), int(round(top)))
		if has_alpha:
			self._image.paste(image, position, image)
			return
		self._image.paste(image, position)
