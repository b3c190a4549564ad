from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from page_bridge.exceptions import DisposedHandleError
from page_bridge.runtime.views import JSFunction, RemoteObject

if TYPE_CHECKING:
	from page_bridge.dom.element import ElementHandle
	from page_bridge.runtime.service import ExecutionContext

_PICK_PROPERTY_JS = """(object, propertyName) => {
	const result = { __proto__: null };
	result[propertyName] = object[propertyName];
	return result;
}"""


class JSHandle:
	"""
	Local proxy for a value living in a page's JavaScript execution context.

	The handle owns its remote object reference: call dispose() (or use it as an async
	context manager) to release it. A disposed handle refuses every operation except
	another dispose().
	"""

	def __init__(self, context: ExecutionContext, remote_object: RemoteObject):
		self._context = context
		self._remote_object = remote_object
		self._disposed = False

	@property
	def execution_context(self) -> ExecutionContext:
		return self._context

	@property
	def remote_object(self) -> RemoteObject:
		return self._remote_object

	@property
	def disposed(self) -> bool:
		return self._disposed

	@property
	def logger(self) -> logging.Logger:
		return self._context.logger

	def _assert_not_disposed(self) -> None:
		if self._disposed:
			raise DisposedHandleError('JSHandle is disposed!')

	async def evaluate(self, page_function: str | JSFunction, *args: Any) -> Any:
		"""Call `page_function` in the page with this handle as its first argument, returning a value."""
		return await self._context.evaluate(page_function, self, *args)

	async def evaluate_handle(self, page_function: str | JSFunction, *args: Any) -> JSHandle:
		"""Like evaluate() but returns the result as a handle."""
		return await self._context.evaluate_handle(page_function, self, *args)

	async def get_property(self, property_name: str) -> JSHandle:
		object_handle = await self.evaluate_handle(_PICK_PROPERTY_JS, property_name)
		try:
			properties = await object_handle.get_properties()
		finally:
			await object_handle.dispose()
		return properties[property_name]

	async def get_properties(self) -> dict[str, JSHandle]:
		self._assert_not_disposed()
		return await self._context.get_properties(self)

	async def json_value(self) -> Any:
		self._assert_not_disposed()
		return await self._context.json_value(self)

	def as_element(self) -> ElementHandle | None:
		return None

	async def dispose(self) -> None:
		if self._disposed:
			return
		self._disposed = True
		await self._context.release_handle(self)

	async def __aenter__(self) -> JSHandle:
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
		await self.dispose()

	def __str__(self) -> str:
		return self._context.handle_to_string(self)

	def __repr__(self) -> str:
		return f'<{type(self).__name__} {self}{" (disposed)" if self._disposed else ""}>'
