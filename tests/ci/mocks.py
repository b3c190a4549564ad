"""Fake CDP session and page collaborators for testing page-bridge without a browser."""

from dataclasses import dataclass
from typing import Any


class FakeCDPSession:
	"""
	Stands in for a CDP session.

	Responses are registered per method with respond(); Runtime.callFunctionOn can also be
	answered per function with respond_to_function(fragment, ...), matched by substring of the
	functionDeclaration. A response may be a dict, an Exception to raise, or a callable taking
	the params and returning either.
	"""

	def __init__(self):
		self.calls: list[tuple[str, dict[str, Any]]] = []
		self.handlers: dict[str, Any] = {}
		self.function_handlers: list[tuple[str, Any]] = []
		self.listeners: dict[str, list] = {}
		self.detached = False

	def respond(self, method: str, response: Any) -> None:
		self.handlers[method] = response

	def respond_to_function(self, fragment: str, response: Any) -> None:
		self.function_handlers.insert(0, (fragment, response))

	@property
	def methods(self) -> list[str]:
		return [method for method, _ in self.calls]

	def calls_to(self, method: str) -> list[dict[str, Any]]:
		return [params for called, params in self.calls if called == method]

	def function_calls(self, fragment: str) -> list[dict[str, Any]]:
		return [params for params in self.calls_to('Runtime.callFunctionOn') if fragment in params['functionDeclaration']]

	async def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
		params = params or {}
		self.calls.append((method, params))

		if method == 'Runtime.callFunctionOn':
			response = self.handlers.get(method, {'result': {'type': 'undefined'}})
			for fragment, function_response in self.function_handlers:
				if fragment in params.get('functionDeclaration', ''):
					response = function_response
					break
		else:
			response = self.handlers.get(method, {})

		if callable(response):
			response = response(params)
		if isinstance(response, Exception):
			raise response
		return response

	def on(self, event: str, handler) -> None:
		self.listeners.setdefault(event, []).append(handler)

	def emit(self, event: str, params: dict[str, Any]) -> None:
		for handler in self.listeners.get(event, []):
			handler(params)

	async def detach(self) -> None:
		self.detached = True


# not fixtures, helpers to build protocol payloads
def js_result(value: Any) -> dict[str, Any]:
	js_type = {bool: 'boolean', str: 'string', int: 'number', float: 'number', list: 'object', dict: 'object'}
	if value is None:
		return {'result': {'type': 'object', 'subtype': 'null', 'value': None}}
	return {'result': {'type': js_type.get(type(value), 'object'), 'value': value}}


def node_result(object_id: str) -> dict[str, Any]:
	return {'result': {'type': 'object', 'subtype': 'node', 'className': 'HTMLDivElement', 'objectId': object_id}}


def object_result(object_id: str, subtype: str | None = None) -> dict[str, Any]:
	remote_object = {'type': 'object', 'className': 'Object', 'objectId': object_id}
	if subtype:
		remote_object['subtype'] = subtype
	return {'result': remote_object}


def layout_metrics(width: float = 800, height: float = 600, page_x: float = 0, page_y: float = 0) -> dict[str, Any]:
	return {'layoutViewport': {'pageX': page_x, 'pageY': page_y, 'clientWidth': width, 'clientHeight': height}}


def rect_quad(x: float, y: float, width: float, height: float) -> list[float]:
	return [x, y, x + width, y, x + width, y + height, x, y + height]


def box_model(padding: list[float], border: list[float] | None = None) -> dict[str, Any]:
	border = border or padding
	return {
		'model': {
			'content': padding,
			'padding': padding,
			'border': border,
			'margin': border,
			'width': int(border[2] - border[0]),
			'height': int(border[5] - border[1]),
		}
	}


class FakeMouse:
	def __init__(self, events: list):
		self.events = events
		self.error: Exception | None = None

	async def _record(self, name: str, x: float, y: float, options: dict[str, Any]) -> None:
		self.events.append((name, x, y, options))
		if self.error is not None:
			raise self.error

	async def move(self, x: float, y: float, **options: Any) -> None:
		await self._record('mouse.move', x, y, options)

	async def click(self, x: float, y: float, **options: Any) -> None:
		await self._record('mouse.click', x, y, options)

	async def dblclick(self, x: float, y: float, **options: Any) -> None:
		await self._record('mouse.dblclick', x, y, options)

	async def tripleclick(self, x: float, y: float, **options: Any) -> None:
		await self._record('mouse.tripleclick', x, y, options)


class FakeKeyboard:
	def __init__(self, events: list):
		self.events = events
		self.modifiers: list[str] = []

	async def ensure_modifiers(self, modifiers):
		previous = list(self.modifiers)
		self.modifiers = list(modifiers)
		self.events.append(('keyboard.ensure_modifiers', list(modifiers)))
		return previous

	async def send_characters(self, text: str) -> None:
		self.events.append(('keyboard.send_characters', text))

	async def type(self, text: str, delay: float | None = None) -> None:
		self.events.append(('keyboard.type', text, delay))

	async def press(self, key: str, delay: float | None = None, text: str | None = None) -> None:
		self.events.append(('keyboard.press', key, delay, text))


class FakePage:
	def __init__(self):
		self.events: list = []
		self.mouse = FakeMouse(self.events)
		self.keyboard = FakeKeyboard(self.events)
		self.javascript_enabled = True
		self.viewport_size: dict[str, int] | None = {'width': 800, 'height': 600}
		self.frames: dict[str, FakeFrame] = {}
		self.screenshot_error: Exception | None = None

	def viewport(self):
		return self.viewport_size

	async def set_viewport(self, viewport) -> None:
		self.events.append(('set_viewport', dict(viewport)))
		self.viewport_size = dict(viewport)

	async def screenshot(self, clip: dict[str, float], **options: Any) -> bytes:
		self.events.append(('screenshot', clip, options))
		if self.screenshot_error is not None:
			raise self.screenshot_error
		return b'\x89PNG fake'

	def frame(self, frame_id: str):
		return self.frames.get(frame_id)


@dataclass
class FakeFrame:
	id: str
	page: FakePage
