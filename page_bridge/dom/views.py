from dataclasses import dataclass
from typing import TypedDict

from pydantic import BaseModel, ConfigDict, Field


class Point(BaseModel):
	"""CSS pixels, relative to the viewport."""

	x: float
	y: float


# Four points in protocol order (clockwise or counter-clockwise), possibly rotated or clipped
Quad = list[Point]


class BoundingBox(BaseModel):
	x: float
	y: float
	width: float
	height: float


class BoxModel(BaseModel):
	"""DOM.BoxModel: each quad is 8 numbers, x/y pairs of the four corners."""

	model_config = ConfigDict(populate_by_name=True, extra='allow')

	content: list[float]
	padding: list[float]
	border: list[float]
	margin: list[float]
	width: int
	height: int


class LayoutViewport(BaseModel):
	"""Page.LayoutViewport: scroll offset of the page and size of the visible area."""

	model_config = ConfigDict(populate_by_name=True, extra='allow')

	page_x: float = Field(alias='pageX')
	page_y: float = Field(alias='pageY')
	client_width: float = Field(alias='clientWidth')
	client_height: float = Field(alias='clientHeight')


@dataclass
class ViewportScroll:
	"""A viewport point and the page scroll still needed to put it at least 1px inside the viewport."""

	point: Point
	scroll_x: float = 0
	scroll_y: float = 0

	@property
	def needs_scroll(self) -> bool:
		return bool(self.scroll_x or self.scroll_y)


class SelectOption(TypedDict, total=False):
	value: str
	label: str
	index: int


class FilePayload(BaseModel):
	"""A file to hand to an <input type=file>, with base64 `data`."""

	model_config = ConfigDict(populate_by_name=True)

	name: str
	mime_type: str = Field(default='application/octet-stream', alias='mimeType')
	data: str
