"""Tests for converting between CDP remote objects and Python values / handles."""

import json
import math

import pytest

from page_bridge.dom.element import ElementHandle
from page_bridge.exceptions import CrossContextError, DisposedHandleError
from page_bridge.runtime.handle import JSHandle
from page_bridge.runtime.serializer import (
	create_js_handle,
	exception_message,
	is_function_source,
	remote_object_from_argument,
	value_from_remote_object,
)
from page_bridge.runtime.views import JSBigInt, RemoteObject


def _same_number(a: float, b: float) -> bool:
	"""Object.is() semantics: NaN equals NaN, -0 differs from 0."""
	if math.isnan(a) or math.isnan(b):
		return math.isnan(a) and math.isnan(b)
	return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)


class TestUnserializableValues:
	"""Numbers JSON cannot carry travel as unserializableValue strings."""

	@pytest.mark.parametrize(
		'encoded, expected',
		[('-0', -0.0), ('NaN', math.nan), ('Infinity', math.inf), ('-Infinity', -math.inf)],
	)
	def test_decode(self, encoded, expected):
		value = value_from_remote_object({'type': 'number', 'unserializableValue': encoded})
		assert _same_number(value, expected)

	def test_round_trip_keeps_identity(self, context):
		"""Encoding then decoding keeps the sign of -0 and NaN-ness, not just == equality."""
		for original in (-0.0, math.nan, math.inf, -math.inf):
			argument = remote_object_from_argument(context, original)
			decoded = value_from_remote_object({'type': 'number', 'unserializableValue': argument['unserializableValue']})
			assert _same_number(decoded, original), f'{original!r} came back as {decoded!r}'

	def test_positive_zero_is_a_plain_value(self, context):
		assert remote_object_from_argument(context, 0.0) == {'value': 0.0}

	def test_bigint(self, context):
		assert remote_object_from_argument(context, JSBigInt(2**70)) == {'unserializableValue': f'{2**70}n'}

		value = value_from_remote_object({'type': 'bigint', 'unserializableValue': '12345678901234567890n'})
		assert isinstance(value, JSBigInt)
		assert value == 12345678901234567890
		assert repr(value) == '12345678901234567890n'

	def test_plain_values(self):
		assert value_from_remote_object({'type': 'string', 'value': 'hello'}) == 'hello'
		assert value_from_remote_object({'type': 'undefined'}) is None
		assert value_from_remote_object(RemoteObject(type='object', value={'a': [1, 2]})) == {'a': [1, 2]}


class TestArguments:
	def test_json_values_pass_by_value(self, context):
		assert remote_object_from_argument(context, {'a': [1, 'two', None]}) == {'value': {'a': [1, 'two', None]}}

	def test_handle_passes_by_reference(self, context):
		handle = JSHandle(context, RemoteObject(type='object', object_id='obj-1'))
		assert remote_object_from_argument(context, handle) == {'objectId': 'obj-1'}

	def test_inline_handle_passes_its_value(self, context):
		assert remote_object_from_argument(context, JSHandle(context, RemoteObject(type='number', value=3))) == {'value': 3}
		negative_zero = JSHandle(context, RemoteObject(type='number', unserializable_value='-0'))
		assert remote_object_from_argument(context, negative_zero) == {'unserializableValue': '-0'}

	@pytest.mark.parametrize(
		'remote_object',
		[
			RemoteObject(type='object', object_id='obj-1'),
			RemoteObject(type='number', value=1),
			RemoteObject(type='number', unserializable_value='NaN'),
			RemoteObject(type='undefined'),
		],
	)
	async def test_disposed_handle_is_rejected(self, context, remote_object):
		handle = JSHandle(context, remote_object)
		await handle.dispose()
		with pytest.raises(DisposedHandleError):
			remote_object_from_argument(context, handle)

	def test_handle_from_another_context_is_rejected(self, context, worker_context):
		handle = JSHandle(worker_context, RemoteObject(type='object', object_id='obj-1'))
		with pytest.raises(CrossContextError, match='only in the context they were created'):
			remote_object_from_argument(context, handle)

	def test_nested_handle_gets_guidance(self, context):
		handle = JSHandle(context, RemoteObject(type='object', object_id='obj-1'))
		with pytest.raises(TypeError, match='Are you passing a nested JSHandle'):
			remote_object_from_argument(context, [handle])

	def test_circular_structure_gets_guidance(self, context):
		circular: dict = {}
		circular['self'] = circular
		with pytest.raises(ValueError, match='Pass handles as top-level arguments only'):
			remote_object_from_argument(context, circular)


class TestHandleCreation:
	def test_node_in_frame_becomes_element(self, context):
		handle = create_js_handle(context, {'type': 'object', 'subtype': 'node', 'objectId': 'node-1'})
		assert isinstance(handle, ElementHandle)
		assert handle.as_element() is handle
		assert handle.owner_page is context.frame.page

	def test_node_without_frame_stays_plain(self, worker_context):
		handle = create_js_handle(worker_context, {'type': 'object', 'subtype': 'node', 'objectId': 'node-1'})
		assert type(handle) is JSHandle
		assert handle.as_element() is None

	def test_other_values_stay_plain(self, context):
		handle = create_js_handle(context, {'type': 'object', 'subtype': 'array', 'objectId': 'arr-1'})
		assert type(handle) is JSHandle
		assert handle.remote_object.object_id == 'arr-1'


class TestExceptionMessage:
	def test_uses_exception_description(self):
		details = {
			'text': 'Uncaught',
			'exception': {'type': 'object', 'subtype': 'error', 'description': 'Error: boom\n    at <anonymous>:1:7'},
		}
		assert exception_message(details) == 'Error: boom\n    at <anonymous>:1:7'

	def test_thrown_primitive(self):
		details = {'text': 'Uncaught', 'exception': {'type': 'number', 'value': 42}}
		assert exception_message(details) == '42'

	def test_text_with_stack(self):
		details = {
			'text': 'SyntaxError',
			'stackTrace': {
				'callFrames': [
					{'functionName': 'run', 'url': 'page.js', 'lineNumber': 3, 'columnNumber': 14, 'scriptId': '1'},
					{'functionName': '', 'url': 'page.js', 'lineNumber': 9, 'columnNumber': 1, 'scriptId': '1'},
				]
			},
		}
		assert exception_message(details) == (
			'SyntaxError\n    at run (page.js:3:14)\n    at <anonymous> (page.js:9:1)'
		)


class TestFunctionDetection:
	@pytest.mark.parametrize(
		'source',
		[
			'function () { return 1; }',
			'function named(a, b) { return a + b; }',
			'async function () {}',
			'async element => element.focus()',
			'element => element.focus()',
			'(a, b) => a + b',
			'  (element, { x, y }) => element.scrollBy(x, y)  ',
			'() => document.title',
		],
	)
	def test_functions(self, source):
		assert is_function_source(source)

	@pytest.mark.parametrize(
		'source',
		['document.title', '1 + 2', '(() => 1)()', '(document)', "'function'", 'functionName()', 'window.x => 1'],
	)
	def test_expressions(self, source):
		assert not is_function_source(source)

	def test_payload_is_json_serializable(self, context):
		"""Call arguments built for CDP must survive json.dumps."""
		arguments = [remote_object_from_argument(context, value) for value in (1, 'a', None, [1.5], -math.inf)]
		json.dumps(arguments)
