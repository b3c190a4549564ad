from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Exact wire strings the protocol uses for numbers JSON can't carry
UNSERIALIZABLE_NEGATIVE_ZERO = '-0'
UNSERIALIZABLE_NAN = 'NaN'
UNSERIALIZABLE_INFINITY = 'Infinity'
UNSERIALIZABLE_NEGATIVE_INFINITY = '-Infinity'
BIGINT_SUFFIX = 'n'


class RemoteObject(BaseModel):
	"""Runtime.RemoteObject as reported by the browser.

	Only one of `object_id`, `value` and `unserializable_value` is meaningful at a time.
	"""

	model_config = ConfigDict(populate_by_name=True, extra='allow', frozen=True)

	type: str = 'undefined'
	subtype: str | None = None
	class_name: str | None = Field(default=None, alias='className')
	value: Any = None
	unserializable_value: str | None = Field(default=None, alias='unserializableValue')
	description: str | None = None
	object_id: str | None = Field(default=None, alias='objectId')


class CallFrame(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra='allow')

	function_name: str = Field(default='', alias='functionName')
	url: str = ''
	line_number: int = Field(default=0, alias='lineNumber')
	column_number: int = Field(default=0, alias='columnNumber')


class StackTrace(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra='allow')

	call_frames: list[CallFrame] = Field(default_factory=list, alias='callFrames')


class ExceptionDetails(BaseModel):
	"""Runtime.ExceptionDetails, the `exceptionDetails` field of evaluate / callFunctionOn."""

	model_config = ConfigDict(populate_by_name=True, extra='allow')

	text: str = ''
	exception: RemoteObject | None = None
	stack_trace: StackTrace | None = Field(default=None, alias='stackTrace')


class JSBigInt(int):
	"""An int that crosses the protocol boundary as a JavaScript BigInt."""

	def __repr__(self) -> str:
		return f'{int(self)}n'


@dataclass(frozen=True)
class JSFunction:
	"""JavaScript function source.

	Plain strings are classified as function or expression by their shape; wrap source in
	JSFunction to force function semantics (e.g. for shorthand methods like `foo(a) { ... }`).
	"""

	source: str

	def __str__(self) -> str:
		return self.source
