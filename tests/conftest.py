"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import io
import os
import sys

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# PIP3 modules
import PIL.Image
import pytest

# local repo modules
import context_canvas.drawing


#============================================
def encode_image(width: int, height: int, color: str = "#3366CC", image_format: str = "PNG") -> bytes:
	"""
	Encode a solid color image.

	Args:
		width: Image width.
		height: Image height.
		color: Fill color.
		image_format: Pillow format name.

	Returns:
		Encoded image bytes.
	"""
	image = PIL.Image.new("RGB", (width, height), color)
	buffer = io.BytesIO()
	image.save(buffer, format=image_format)
	return buffer.getvalue()


@pytest.fixture
def ctx() -> context_canvas.drawing.DrawContext:
	"""
	Measurement context with the default font.
	"""
	return context_canvas.drawing.DrawContext.for_measurement()


@pytest.fixture
def image_bytes():
	"""
	Factory for encoded solid color images.
	"""
	return encode_image
