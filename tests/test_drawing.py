import pytest

import context_canvas.drawing


DrawContext = context_canvas.drawing.DrawContext


#============================================
def test_transform_stack_restores_state() -> None:
	draw_ctx = DrawContext(100, 100)
	draw_ctx.push()
	draw_ctx.scale(2.0)
	draw_ctx.translate(5, 10)
	assert draw_ctx.transform_point(1, 1) == (12.0, 22.0)
	draw_ctx.pop()
	assert draw_ctx.transform_point(1, 1) == (1.0, 1.0)
	with pytest.raises(RuntimeError):
		draw_ctx.pop()


#============================================
def test_set_font_changes_metrics() -> None:
	"""
	A larger font size gives a taller line and wider text.
	"""
	draw_ctx = DrawContext.for_measurement()
	small_width, small_height = draw_ctx.measure_string("Sizing")
	draw_ctx.set_font(None, 24.0)
	large_width, large_height = draw_ctx.measure_string("Sizing")
	assert large_height > small_height
	assert large_width > small_width


#============================================
def test_multiline_height_skips_trailing_spacing() -> None:
	draw_ctx = DrawContext.for_measurement()
	font_height = draw_ctx.font_height()
	_, height = draw_ctx.measure_multiline_string("one\ntwo\nthree", line_spacing=1.5)
	assert height == pytest.approx(3 * font_height * 1.5 - 0.5 * font_height)


#============================================
def test_word_wrap_breaks_on_newlines() -> None:
	draw_ctx = DrawContext.for_measurement()
	lines = draw_ctx.word_wrap("alpha beta\n\ngamma", 10000)
	assert lines == ["alpha beta", "gamma"]


#============================================
def test_anchored_string_is_drawn_in_color() -> None:
	draw_ctx = DrawContext(120, 40, bg_color="#FFFFFF")
	draw_ctx.set_color("#FF0000")
	draw_ctx.draw_string_anchored("MMMM", 60, 20, ax=0.5, ay=0.5)
	red, green, blue = draw_ctx.image.split()
	assert red.getextrema() == (255, 255)
	assert green.getextrema()[0] < 100
	assert blue.getextrema()[0] < 100
	assert draw_ctx.image.getpixel((0, 0)) == (255, 255, 255)
