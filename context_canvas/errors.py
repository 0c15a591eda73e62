"""
Exception types raised while building and rendering scenes.
"""


class ContextCanvasError(Exception):
	pass


class ImageDecodeError(ContextCanvasError):
	"""
	Image bytes could not be decoded into pixel data.
	"""


class FontLoadError(ContextCanvasError):
	"""
	The render font could not be loaded.
	"""


class LayoutError(ContextCanvasError):
	"""
	A layout invariant was violated (empty search input, zero-height
	canvas, or a cycle in the tile tree).
	"""


class SceneFormatError(ContextCanvasError):
	"""
	A scene description file is malformed.
	"""


class OutputFormatError(ContextCanvasError):
	"""
	The output path cannot hold the rendered scenes.
	"""


class LayoutCostWarning(UserWarning):
	"""
	Shape search was asked to lay out enough tiles that its quadratic cost
	becomes noticeable.
	"""
