"""
Conversion between CDP remote objects and Python values / handles.

Numbers JSON cannot carry (-0, NaN, +-Infinity) and BigInts travel as `unserializableValue`
strings; live objects travel as `objectId` references wrapped in a JSHandle.
"""

import json
import math
import re
from typing import TYPE_CHECKING, Any

from page_bridge.exceptions import CrossContextError, DisposedHandleError
from page_bridge.runtime.handle import JSHandle
from page_bridge.runtime.views import (
	BIGINT_SUFFIX,
	UNSERIALIZABLE_INFINITY,
	UNSERIALIZABLE_NAN,
	UNSERIALIZABLE_NEGATIVE_INFINITY,
	UNSERIALIZABLE_NEGATIVE_ZERO,
	ExceptionDetails,
	JSBigInt,
	RemoteObject,
)
from page_bridge.utils import format_js_value

if TYPE_CHECKING:
	from page_bridge.runtime.service import ExecutionContext

_SINGLE_PARAM_ARROW_RE = re.compile(r'^[A-Za-z_$][\w$]*\s*=>')
_FUNCTION_KEYWORD_RE = re.compile(r'^(?:async\b|function\b)')


def value_from_remote_object(remote_object: RemoteObject | dict[str, Any]) -> Any:
	if isinstance(remote_object, dict):
		remote_object = RemoteObject.model_validate(remote_object)

	unserializable = remote_object.unserializable_value
	if unserializable:
		if remote_object.type == 'bigint' or unserializable.endswith(BIGINT_SUFFIX):
			return JSBigInt(int(unserializable.removesuffix(BIGINT_SUFFIX)))
		if unserializable == UNSERIALIZABLE_NEGATIVE_ZERO:
			return -0.0
		if unserializable == UNSERIALIZABLE_NAN:
			return math.nan
		if unserializable == UNSERIALIZABLE_INFINITY:
			return math.inf
		if unserializable == UNSERIALIZABLE_NEGATIVE_INFINITY:
			return -math.inf
		raise ValueError(f'Unsupported unserializable value: {unserializable}')
	return remote_object.value


def _unserializable_float(value: float) -> str | None:
	if math.isnan(value):
		return UNSERIALIZABLE_NAN
	if math.isinf(value):
		return UNSERIALIZABLE_INFINITY if value > 0 else UNSERIALIZABLE_NEGATIVE_INFINITY
	if value == 0 and math.copysign(1.0, value) < 0:
		return UNSERIALIZABLE_NEGATIVE_ZERO
	return None


def remote_object_from_argument(context: 'ExecutionContext', arg: Any) -> dict[str, Any]:
	"""Build a Runtime.CallArgument for `arg` as seen from `context`."""
	if isinstance(arg, JSBigInt):
		return {'unserializableValue': f'{int(arg)}{BIGINT_SUFFIX}'}

	if isinstance(arg, float):
		unserializable = _unserializable_float(arg)
		if unserializable is not None:
			return {'unserializableValue': unserializable}

	if isinstance(arg, JSHandle):
		if arg.disposed:
			raise DisposedHandleError('JSHandle is disposed!')
		if arg.execution_context is not context:
			raise CrossContextError('JSHandles can be evaluated only in the context they were created!')
		remote_object = arg.remote_object
		if remote_object.unserializable_value:
			return {'unserializableValue': remote_object.unserializable_value}
		if not remote_object.object_id:
			return {'value': remote_object.value}
		return {'objectId': remote_object.object_id}

	try:
		json.dumps(arg)
	except (TypeError, ValueError) as e:
		# circular structures and handles nested inside plain containers end up here
		raise type(e)(f'{e} Are you passing a nested JSHandle? Pass handles as top-level arguments only.') from e
	return {'value': arg}


def create_js_handle(context: 'ExecutionContext', remote_object: RemoteObject | dict[str, Any]) -> JSHandle:
	"""Wrap a remote object: DOM nodes in a frame become ElementHandles, everything else a JSHandle."""
	# imported here, the element module depends on this one
	from page_bridge.dom.element import ElementHandle

	if isinstance(remote_object, dict):
		remote_object = RemoteObject.model_validate(remote_object)

	frame = context.frame
	if remote_object.subtype == 'node' and frame is not None:
		return ElementHandle(context, context.session, remote_object, frame.page)
	return JSHandle(context, remote_object)


def exception_message(exception_details: ExceptionDetails | dict[str, Any]) -> str:
	if isinstance(exception_details, dict):
		exception_details = ExceptionDetails.model_validate(exception_details)

	exception = exception_details.exception
	if exception is not None:
		return exception.description or format_js_value(value_from_remote_object(exception))

	message = exception_details.text
	if exception_details.stack_trace:
		for call_frame in exception_details.stack_trace.call_frames:
			location = f'{call_frame.url}:{call_frame.line_number}:{call_frame.column_number}'
			function_name = call_frame.function_name or '<anonymous>'
			message += f'\n    at {function_name} ({location})'
	return message


def is_function_source(source: str) -> bool:
	"""Guess whether JavaScript source text is a function rather than an expression.

	Recognizes `function ...`, `async ...`, `x => ...` and `(...) => ...`; anything else
	(including `(() => 1)()`) is treated as an expression.
	"""
	text = source.strip()
	if _FUNCTION_KEYWORD_RE.match(text) or _SINGLE_PARAM_ARROW_RE.match(text):
		return True
	if not text.startswith('('):
		return False

	depth = 0
	for index, char in enumerate(text):
		if char == '(':
			depth += 1
		elif char == ')':
			depth -= 1
			if depth == 0:
				return text[index + 1 :].lstrip().startswith('=>')
	return False
