"""Quad math for turning browser-reported node geometry into click targets."""

from collections.abc import Sequence

from page_bridge.dom.views import BoundingBox, Point, Quad

# Quads at or below this area (CSS px) are too small to click into
MIN_CLICKABLE_AREA = 1


def from_protocol_quad(quad: Sequence[float]) -> Quad:
	return [
		Point(x=quad[0], y=quad[1]),
		Point(x=quad[2], y=quad[3]),
		Point(x=quad[4], y=quad[5]),
		Point(x=quad[6], y=quad[7]),
	]


def intersect_quad_with_viewport(quad: Quad, width: float, height: float) -> Quad:
	return [Point(x=min(max(point.x, 0), width), y=min(max(point.y, 0), height)) for point in quad]


def compute_quad_area(quad: Sequence[Point]) -> float:
	"""Shoelace formula: half the absolute sum of the cross products of consecutive corners."""
	area = 0.0
	for index, p1 in enumerate(quad):
		p2 = quad[(index + 1) % len(quad)]
		area += (p1.x * p2.y - p2.x * p1.y) / 2
	return abs(area)


def quad_center(quad: Sequence[Point]) -> Point:
	return Point(
		x=sum(point.x for point in quad) / len(quad),
		y=sum(point.y for point in quad) / len(quad),
	)


def clickable_quads(protocol_quads: Sequence[Sequence[float]], viewport_width: float, viewport_height: float) -> list[Quad]:
	"""Clip every quad to the viewport and keep, in browser order, the ones still big enough to click."""
	quads = (from_protocol_quad(quad) for quad in protocol_quads)
	clipped = (intersect_quad_with_viewport(quad, viewport_width, viewport_height) for quad in quads)
	return [quad for quad in clipped if compute_quad_area(quad) > MIN_CLICKABLE_AREA]


def quad_min_corner(quad: Sequence[float]) -> Point:
	return Point(x=min(quad[0], quad[2], quad[4], quad[6]), y=min(quad[1], quad[3], quad[5], quad[7]))


def bounding_box_from_quad(quad: Sequence[float]) -> BoundingBox:
	origin = quad_min_corner(quad)
	return BoundingBox(
		x=origin.x,
		y=origin.y,
		width=max(quad[0], quad[2], quad[4], quad[6]) - origin.x,
		height=max(quad[1], quad[3], quad[5], quad[7]) - origin.y,
	)
