from __future__ import annotations

import asyncio
import math
from collections.abc import Awaitable, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from page_bridge.dom.files import load_files
from page_bridge.dom.geometry import bounding_box_from_quad, clickable_quads, quad_center, quad_min_corner
from page_bridge.dom.scripts import (
	FILL_JS,
	FOCUS_JS,
	IS_INTERSECTING_VIEWPORT_JS,
	IS_MULTIPLE_JS,
	QUERY_SELECTOR_ALL_JS,
	QUERY_SELECTOR_JS,
	SCROLL_BY_JS,
	SCROLL_INTO_VIEW_IF_NEEDED_JS,
	SELECT_OPTIONS_JS,
	SET_INPUT_FILES_JS,
)
from page_bridge.dom.views import BoundingBox, BoxModel, FilePayload, LayoutViewport, Point, SelectOption, ViewportScroll
from page_bridge.exceptions import (
	ElementNotFoundError,
	ElementStateError,
	MultipleFileInputError,
	ScrollFailureError,
	TypeValidationError,
	VisibilityError,
)
from page_bridge.runtime.handle import JSHandle
from page_bridge.runtime.views import JSFunction, RemoteObject
from page_bridge.utils import time_execution_async

if TYPE_CHECKING:
	from page_bridge.browser.views import CDPSessionProtocol, FrameProtocol, Modifier, PageProtocol
	from page_bridge.runtime.service import ExecutionContext

NOT_VISIBLE_MESSAGE = 'Node is either not visible or not an HTMLElement'


def _is_number(value: Any) -> bool:
	return isinstance(value, int | float) and not isinstance(value, bool)


def normalize_select_options(values: Sequence[Any]) -> list[SelectOption | ElementHandle]:
	"""
	Turn select() arguments into option descriptors.

	Strings select by value, ints by index; mappings and ElementHandles (<option> nodes) are
	passed on as given. Raises TypeValidationError when a descriptor field has the wrong type.
	"""
	options: list[Any] = []
	for value in values:
		if isinstance(value, ElementHandle | Mapping):
			options.append(value)
		elif isinstance(value, int) and not isinstance(value, bool):
			options.append({'index': value})
		else:
			options.append({'value': value})

	for option in options:
		if isinstance(option, ElementHandle):
			continue
		if 'value' in option and not isinstance(option['value'], str):
			raise TypeValidationError(
				f'Values must be strings. Found value "{option["value"]}" of type "{type(option["value"]).__name__}"'
			)
		if 'label' in option and not isinstance(option['label'], str):
			raise TypeValidationError(
				f'Labels must be strings. Found label "{option["label"]}" of type "{type(option["label"]).__name__}"'
			)
		if 'index' in option and not _is_number(option['index']):
			raise TypeValidationError(
				f'Indices must be numbers. Found index "{option["index"]}" of type "{type(option["index"]).__name__}"'
			)
	return options


class ElementHandle(JSHandle):
	"""
	Handle to a DOM node in a frame's execution context.

	Pointer actions scroll the node into view, resolve a target point from the geometry the
	browser reports and then drive the page's mouse. Every step awaits the previous one, since
	scrolling changes what later geometry queries return.
	"""

	def __init__(
		self,
		context: ExecutionContext,
		session: CDPSessionProtocol,
		remote_object: RemoteObject,
		page: PageProtocol,
	):
		super().__init__(context, remote_object)
		self._session = session
		self._page = page

	@property
	def owner_page(self) -> PageProtocol:
		return self._page

	def as_element(self) -> ElementHandle:
		return self

	async def _send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
		self._assert_not_disposed()
		return await self._session.send(method, params or {})

	async def content_frame(self) -> FrameProtocol | None:
		"""The frame an <iframe> / <frame> element hosts, None for any other node."""
		node_info = await self._send('DOM.describeNode', {'objectId': self.remote_object.object_id})
		frame_id = node_info.get('node', {}).get('frameId')
		if not isinstance(frame_id, str):
			return None
		return self._page.frame(frame_id)

	# region - Geometry

	async def scroll_into_view_if_needed(self) -> None:
		error = await self.evaluate(SCROLL_INTO_VIEW_IF_NEEDED_JS, self._page.javascript_enabled)
		if error:
			raise VisibilityError(error)

	async def is_intersecting_viewport(self) -> bool:
		return await self.evaluate(IS_INTERSECTING_VIEWPORT_JS)

	async def _get_content_quads(self) -> list[list[float]] | None:
		self._assert_not_disposed()
		try:
			response = await self._session.send('DOM.getContentQuads', {'objectId': self.remote_object.object_id})
		except Exception as e:
			self.logger.debug(f'DOM.getContentQuads failed for {self}: {type(e).__name__}: {e}')
			return None
		return response.get('quads')

	async def _get_box_model(self) -> BoxModel | None:
		self._assert_not_disposed()
		try:
			response = await self._session.send('DOM.getBoxModel', {'objectId': self.remote_object.object_id})
		except Exception as e:
			self.logger.debug(f'DOM.getBoxModel failed for {self}: {type(e).__name__}: {e}')
			return None
		return BoxModel.model_validate(response['model'])

	async def _layout_viewport(self) -> LayoutViewport:
		metrics = await self._send('Page.getLayoutMetrics')
		return LayoutViewport.model_validate(metrics['layoutViewport'])

	async def clickable_point(self) -> Point:
		"""Center of the first content quad that is still bigger than 1px once clipped to the viewport."""
		self._assert_not_disposed()
		quads, layout_viewport = await asyncio.gather(self._get_content_quads(), self._layout_viewport())
		if not quads:
			raise VisibilityError(NOT_VISIBLE_MESSAGE)

		visible_quads = clickable_quads(quads, layout_viewport.client_width, layout_viewport.client_height)
		if not visible_quads:
			raise VisibilityError(NOT_VISIBLE_MESSAGE)
		return quad_center(visible_quads[0])

	async def _viewport_point_and_scroll(self, relative_point: Point) -> ViewportScroll:
		model = await self._get_box_model()
		if model is None:
			point = relative_point
		else:
			# padding quad, to match offsetX / offsetY
			origin = quad_min_corner(model.padding)
			point = Point(x=origin.x + relative_point.x, y=origin.y + relative_point.y)

		layout_viewport = await self._layout_viewport()
		# keep one extra pixel away from the viewport edges
		scroll = ViewportScroll(point=point)
		if point.x < 1:
			scroll.scroll_x = point.x - 1
		if point.x > layout_viewport.client_width - 1:
			scroll.scroll_x = point.x - layout_viewport.client_width + 1
		if point.y < 1:
			scroll.scroll_y = point.y - 1
		if point.y > layout_viewport.client_height - 1:
			scroll.scroll_y = point.y - layout_viewport.client_height + 1
		return scroll

	async def bounding_box(self) -> BoundingBox | None:
		model = await self._get_box_model()
		if model is None:
			return None
		return bounding_box_from_quad(model.border)

	# endregion

	# region - Pointer actions

	async def _perform_pointer_action(
		self,
		action: Callable[[Point], Awaitable[None]],
		relative_point: Point | None = None,
		modifiers: Sequence[Modifier] | None = None,
	) -> None:
		await self.scroll_into_view_if_needed()

		if relative_point is not None:
			target = await self._viewport_point_and_scroll(relative_point)
			if target.needs_scroll:
				error = await self.evaluate(SCROLL_BY_JS, target.scroll_x, target.scroll_y)
				if error:
					raise ScrollFailureError(error)
				target = await self._viewport_point_and_scroll(relative_point)
				if target.needs_scroll:
					raise ScrollFailureError('Failed to scroll relative point into viewport')
			point = target.point
		else:
			point = await self.clickable_point()

		keyboard = self._page.keyboard
		restore_modifiers = None
		if modifiers:
			restore_modifiers = await keyboard.ensure_modifiers(modifiers)
		# not restored if the action raises
		await action(point)
		if restore_modifiers is not None:
			await keyboard.ensure_modifiers(restore_modifiers)

	@time_execution_async('--hover')
	async def hover(self, relative_point: Point | None = None, modifiers: Sequence[Modifier] | None = None) -> None:
		mouse = self._page.mouse
		await self._perform_pointer_action(lambda point: mouse.move(point.x, point.y), relative_point, modifiers)

	@time_execution_async('--click')
	async def click(
		self,
		relative_point: Point | None = None,
		modifiers: Sequence[Modifier] | None = None,
		**options: Any,
	) -> None:
		mouse = self._page.mouse
		await self._perform_pointer_action(lambda point: mouse.click(point.x, point.y, **options), relative_point, modifiers)

	@time_execution_async('--dblclick')
	async def dblclick(
		self,
		relative_point: Point | None = None,
		modifiers: Sequence[Modifier] | None = None,
		**options: Any,
	) -> None:
		mouse = self._page.mouse
		await self._perform_pointer_action(lambda point: mouse.dblclick(point.x, point.y, **options), relative_point, modifiers)

	@time_execution_async('--tripleclick')
	async def tripleclick(
		self,
		relative_point: Point | None = None,
		modifiers: Sequence[Modifier] | None = None,
		**options: Any,
	) -> None:
		mouse = self._page.mouse
		await self._perform_pointer_action(
			lambda point: mouse.tripleclick(point.x, point.y, **options), relative_point, modifiers
		)

	# endregion

	# region - Form interactions

	async def select(self, *values: str | int | SelectOption | ElementHandle) -> list[str]:
		"""Select <option>s by value, label, index or handle. Returns the values that ended up selected."""
		options = normalize_select_options(values)
		return await self.evaluate(SELECT_OPTIONS_JS, *options)

	@time_execution_async('--fill')
	async def fill(self, value: str) -> None:
		if not isinstance(value, str):
			raise TypeValidationError(f'Value must be string. Found value "{value}" of type "{type(value).__name__}"')
		error = await self.evaluate(FILL_JS)
		if error:
			raise ElementStateError(error)
		await self.focus()
		if value:
			await self._page.keyboard.send_characters(value)
		else:
			# the current contents are selected, so this clears them
			await self._page.keyboard.press('Delete')

	async def set_input_files(self, *files: str | Path | FilePayload) -> None:
		multiple = await self.evaluate(IS_MULTIPLE_JS)
		if not multiple and len(files) > 1:
			raise MultipleFileInputError('Non-multiple file input can only accept single file!')
		payloads = await load_files(files)
		await self.evaluate(SET_INPUT_FILES_JS, [payload.model_dump(by_alias=True) for payload in payloads])

	async def focus(self) -> None:
		await self.evaluate(FOCUS_JS)

	async def type(self, text: str, delay: float | None = None) -> None:
		await self.focus()
		await self._page.keyboard.type(text, delay=delay)

	async def press(self, key: str, delay: float | None = None, text: str | None = None) -> None:
		await self.focus()
		await self._page.keyboard.press(key, delay=delay, text=text)

	# endregion

	# region - Queries

	async def _query_all(self, selector: str) -> JSHandle:
		return await self.evaluate_handle(QUERY_SELECTOR_ALL_JS, selector, await self.execution_context.injected())

	async def _elements_from_array(self, array_handle: JSHandle) -> list[ElementHandle]:
		try:
			properties = await array_handle.get_properties()
		finally:
			await array_handle.dispose()

		elements: list[ElementHandle] = []
		for property_handle in properties.values():
			element = property_handle.as_element()
			if element is not None:
				elements.append(element)
			else:
				await property_handle.dispose()
		return elements

	async def query_selector(self, selector: str) -> ElementHandle | None:
		"""First element in this subtree matching the CSS `selector`, or None."""
		handle = await self.evaluate_handle(QUERY_SELECTOR_JS, f'css={selector}', await self.execution_context.injected())
		element = handle.as_element()
		if element is not None:
			return element
		await handle.dispose()
		return None

	async def query_selector_all(self, selector: str) -> list[ElementHandle]:
		return await self._elements_from_array(await self._query_all(f'css={selector}'))

	async def xpath(self, expression: str) -> list[ElementHandle]:
		return await self._elements_from_array(await self._query_all(f'xpath={expression}'))

	async def eval_on_selector(self, selector: str, page_function: str | JSFunction, *args: Any) -> Any:
		"""Run `page_function` against the first match of `selector`."""
		element = await self.query_selector(selector)
		if element is None:
			raise ElementNotFoundError(f'failed to find element matching selector "{selector}"')
		try:
			return await element.evaluate(page_function, *args)
		finally:
			await element.dispose()

	async def eval_on_selector_all(self, selector: str, page_function: str | JSFunction, *args: Any) -> Any:
		"""Run `page_function` against the array of all matches of `selector`."""
		array_handle = await self._query_all(f'css={selector}')
		try:
			return await array_handle.evaluate(page_function, *args)
		finally:
			await array_handle.dispose()

	# endregion

	# region - Screenshot

	@asynccontextmanager
	async def _viewport_fitting(self, box: BoundingBox):
		"""Grow the viewport to fit `box` while the block runs, then put the original size back."""
		viewport = self._page.viewport()
		if viewport is None or (box.width <= viewport['width'] and box.height <= viewport['height']):
			yield
			return

		await self._page.set_viewport(
			{
				**viewport,
				'width': max(viewport['width'], math.ceil(box.width)),
				'height': max(viewport['height'], math.ceil(box.height)),
			}
		)
		try:
			yield
		finally:
			await self._page.set_viewport(viewport)

	@time_execution_async('--screenshot')
	async def screenshot(self, **options: Any) -> bytes:
		"""Capture the page clipped to this element, growing the viewport if the element does not fit."""
		box = await self.bounding_box()
		if box is None:
			raise VisibilityError(NOT_VISIBLE_MESSAGE)

		async with self._viewport_fitting(box):
			await self.scroll_into_view_if_needed()

			box = await self.bounding_box()
			if box is None:
				raise VisibilityError(NOT_VISIBLE_MESSAGE)
			if box.width == 0:
				raise VisibilityError('Node has 0 width.')
			if box.height == 0:
				raise VisibilityError('Node has 0 height.')

			layout_viewport = await self._layout_viewport()
			clip = {
				'x': box.x + layout_viewport.page_x,
				'y': box.y + layout_viewport.page_y,
				'width': box.width,
				'height': box.height,
			}
			self.logger.debug(f'📸 Element screenshot clip {clip}')
			return await self._page.screenshot(clip=clip, **options)

	# endregion
