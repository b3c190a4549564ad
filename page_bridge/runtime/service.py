from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Any

from page_bridge.config import CONFIG
from page_bridge.dom.scripts import injected_script_source
from page_bridge.exceptions import ContextDestroyedError, EvaluationError, UnserializableFunctionError
from page_bridge.runtime.handle import JSHandle
from page_bridge.runtime.serializer import (
	create_js_handle,
	exception_message,
	is_function_source,
	remote_object_from_argument,
	value_from_remote_object,
)
from page_bridge.runtime.views import JSFunction, RemoteObject
from page_bridge.utils import format_js_value

if TYPE_CHECKING:
	from page_bridge.browser.views import CDPSessionProtocol, FrameProtocol

SOURCE_URL_REGEX = re.compile(r'^[\040\t]*//[@#] sourceURL=\s*(\S*?)\s*$', re.MULTILINE)

# Serialization limits of returnByValue, answered as undefined instead of failing the call
BENIGN_UNDEFINED_ERRORS = ('Object reference chain is too long', "Object couldn't be returned by value")
CONTEXT_DESTROYED_ERRORS = ('Cannot find context with specified id', 'Inspected target navigated or closed')


def _function_candidates(source: str) -> list[str]:
	"""Source text as given, then the single rewrite that turns a shorthand method into a function."""
	if source.startswith('async '):
		rewritten = 'async function ' + source[len('async ') :]
	else:
		rewritten = 'function ' + source
	return [source, rewritten]


class ExecutionContext:
	"""
	A JavaScript execution context (realm) inside a page, frame or worker.

	Active until the browser reports it destroyed (usually by a navigation); from then on
	every evaluate / property call raises ContextDestroyedError.
	"""

	def __init__(
		self,
		session: CDPSessionProtocol,
		context_payload: dict[str, Any],
		frame: FrameProtocol | None = None,
	):
		self._session = session
		self._context_id: int = context_payload['id']
		self._name: str = context_payload.get('name', '')
		self._origin: str = context_payload.get('origin', '')
		self._frame = frame
		self._destroyed = False
		self._injected_handle: JSHandle | None = None
		self._injected_lock = asyncio.Lock()
		self._function_declarations: dict[str, str] = {}
		self._logger: logging.Logger | None = None

	@property
	def session(self) -> CDPSessionProtocol:
		return self._session

	@property
	def context_id(self) -> int:
		return self._context_id

	@property
	def frame(self) -> FrameProtocol | None:
		return self._frame

	@property
	def destroyed(self) -> bool:
		return self._destroyed

	@property
	def logger(self) -> logging.Logger:
		if self._logger is None:
			self._logger = logging.getLogger(f'page_bridge.{self}')
		return self._logger

	def __str__(self) -> str:
		return f'ExecutionContext#{self._context_id}'

	def __repr__(self) -> str:
		state = 'destroyed' if self._destroyed else 'active'
		return f'<ExecutionContext id={self._context_id} name={self._name!r} origin={self._origin!r} {state}>'

	def mark_destroyed(self) -> None:
		"""Move to the terminal Destroyed state. Handles created here stay around but become unusable."""
		if self._destroyed:
			return
		self._destroyed = True
		self._injected_handle = None
		self._function_declarations.clear()
		self.logger.debug('💀 Execution context destroyed')

	# region - Protocol plumbing

	async def _send(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
		if self._destroyed:
			raise ContextDestroyedError()
		try:
			return await self._session.send(method, params)
		except Exception as error:
			return self._rewrite_error(method, error)

	def _rewrite_error(self, method: str, error: Exception) -> dict[str, Any]:
		message = str(error).rstrip()
		if any(text in message for text in BENIGN_UNDEFINED_ERRORS):
			self.logger.debug(f'{method} result too large or deep to return by value, using undefined')
			return {'result': {'type': 'undefined'}}
		if message.endswith(CONTEXT_DESTROYED_ERRORS):
			self.mark_destroyed()
			raise ContextDestroyedError() from error
		raise error

	# endregion

	# region - Evaluation

	async def evaluate(self, page_function: str | JSFunction, *args: Any, return_by_value: bool = True) -> Any:
		"""
		Run an expression or a function in this context.

		Args:
			page_function: JavaScript expression text, function source text, or a JSFunction
			*args: arguments for a function; JSHandles from this context are passed by reference
			return_by_value: return a Python value (True) or a JSHandle / ElementHandle (False)
		"""
		if isinstance(page_function, JSFunction) or (isinstance(page_function, str) and is_function_source(page_function)):
			response = await self._call_function(str(page_function), args, return_by_value)
		elif isinstance(page_function, str):
			if args:
				raise TypeError('Arguments can only be passed to a function, not to an expression')
			response = await self._evaluate_expression(page_function, return_by_value)
		else:
			raise TypeError(f'Expected to get |str| or |JSFunction| as the first argument, but got "{page_function!r}" instead.')

		exception_details = response.get('exceptionDetails')
		if exception_details:
			raise EvaluationError(exception_message(exception_details), exception_details)

		remote_object = RemoteObject.model_validate(response.get('result') or {})
		if return_by_value:
			return value_from_remote_object(remote_object)
		return create_js_handle(self, remote_object)

	async def evaluate_handle(self, page_function: str | JSFunction, *args: Any) -> JSHandle:
		return await self.evaluate(page_function, *args, return_by_value=False)

	def _source_url_suffix(self) -> str:
		return f'//# sourceURL={CONFIG.PAGE_BRIDGE_EVALUATION_SCRIPT_URL}'

	async def _evaluate_expression(self, expression: str, return_by_value: bool) -> dict[str, Any]:
		if not SOURCE_URL_REGEX.search(expression):
			expression = f'{expression}\n{self._source_url_suffix()}'
		return await self._send(
			'Runtime.evaluate',
			{
				'expression': expression,
				'contextId': self._context_id,
				'returnByValue': return_by_value,
				'awaitPromise': True,
				'userGesture': True,
			},
		)

	async def _call_function(self, source: str, args: tuple[Any, ...], return_by_value: bool) -> dict[str, Any]:
		call_arguments = [remote_object_from_argument(self, arg) for arg in args]
		function_text = await self._serialize_function(source.strip())
		return await self._send(
			'Runtime.callFunctionOn',
			{
				'functionDeclaration': f'{function_text}\n{self._source_url_suffix()}\n',
				'executionContextId': self._context_id,
				'arguments': call_arguments,
				'returnByValue': return_by_value,
				'awaitPromise': True,
				'userGesture': True,
			},
		)

	async def _serialize_function(self, source: str) -> str:
		cached = self._function_declarations.get(source)
		if cached is not None:
			return cached

		for candidate in _function_candidates(source):
			if await self._is_parseable(candidate):
				self._function_declarations[source] = candidate
				return candidate

		raise UnserializableFunctionError('Passed function is not well-serializable!')

	async def _is_parseable(self, function_text: str) -> bool:
		response = await self._send(
			'Runtime.compileScript',
			{
				'expression': f'({function_text})',
				'sourceURL': '',
				'persistScript': False,
				'executionContextId': self._context_id,
			},
		)
		return not response.get('exceptionDetails')

	# endregion

	# region - Handle servicing

	async def adopt_backend_node(self, backend_node_id: int) -> JSHandle:
		"""Resolve a DOM backend node id (e.g. from DOM.describeNode) to a handle in this context."""
		response = await self._send(
			'DOM.resolveNode',
			{'backendNodeId': backend_node_id, 'executionContextId': self._context_id},
		)
		return create_js_handle(self, response['object'])

	async def get_properties(self, handle: JSHandle) -> dict[str, JSHandle]:
		"""Own enumerable properties of `handle`, in protocol order. The caller disposes the returned handles."""
		object_id = handle.remote_object.object_id
		if not object_id:
			return {}
		response = await self._send('Runtime.getProperties', {'objectId': object_id, 'ownProperties': True})
		result: dict[str, JSHandle] = {}
		for property_descriptor in response.get('result', []):
			if not property_descriptor.get('enumerable'):
				continue
			result[property_descriptor['name']] = create_js_handle(self, property_descriptor.get('value') or {})
		return result

	async def json_value(self, handle: JSHandle) -> Any:
		remote_object = handle.remote_object
		if not remote_object.object_id:
			return value_from_remote_object(remote_object)

		response = await self._send(
			'Runtime.callFunctionOn',
			{
				'functionDeclaration': 'function() { return this; }',
				'objectId': remote_object.object_id,
				'returnByValue': True,
				'awaitPromise': True,
			},
		)
		exception_details = response.get('exceptionDetails')
		if exception_details:
			raise EvaluationError(exception_message(exception_details), exception_details)
		return value_from_remote_object(response.get('result') or {})

	async def release_handle(self, handle: JSHandle) -> None:
		object_id = handle.remote_object.object_id
		if not object_id or self._destroyed:
			return
		try:
			await self._session.send('Runtime.releaseObject', {'objectId': object_id})
		except Exception as e:
			# the object usually went away with its page already
			self.logger.debug(f'Failed to release {handle}: {type(e).__name__}: {e}')

	def handle_to_string(self, handle: JSHandle) -> str:
		remote_object = handle.remote_object
		if remote_object.object_id:
			return f'JSHandle@{remote_object.subtype or remote_object.type}'
		if remote_object.subtype == 'null':
			return 'JSHandle:null'
		return f'JSHandle:{format_js_value(value_from_remote_object(remote_object))}'

	async def injected(self) -> JSHandle:
		"""Handle to the in-page query helper, installed once per context."""
		async with self._injected_lock:
			if self._injected_handle is None or self._injected_handle.disposed:
				self._injected_handle = await self.evaluate_handle(injected_script_source())
			return self._injected_handle

	# endregion
