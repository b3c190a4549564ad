"""
Interfaces of the collaborators the element engine drives: the CDP session, the page and its
frames, and the mouse / keyboard input primitives.
"""

import sys
from collections.abc import Sequence
from typing import Any, Literal, Protocol

from playwright._impl._api_structures import ViewportSize

# fix pydantic error on python 3.11
# PydanticUserError: Please use `typing_extensions.TypedDict` instead of `typing.TypedDict` on Python < 3.12.
if sys.version_info < (3, 12):
	from typing_extensions import TypedDict

	ViewportSize = TypedDict('ViewportSize', ViewportSize.__annotations__, total=ViewportSize.__total__)

Modifier = Literal['Alt', 'Control', 'Meta', 'Shift']
MODIFIERS: tuple[Modifier, ...] = ('Alt', 'Control', 'Meta', 'Shift')


class CDPSessionProtocol(Protocol):
	async def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]: ...


class MouseProtocol(Protocol):
	async def move(self, x: float, y: float, **options: Any) -> None: ...

	async def click(self, x: float, y: float, **options: Any) -> None: ...

	async def dblclick(self, x: float, y: float, **options: Any) -> None: ...

	async def tripleclick(self, x: float, y: float, **options: Any) -> None: ...


class KeyboardProtocol(Protocol):
	async def ensure_modifiers(self, modifiers: Sequence[Modifier]) -> list[Modifier]:
		"""Hold exactly `modifiers` down, returning the modifiers that were held before."""
		...

	async def send_characters(self, text: str) -> None: ...

	async def type(self, text: str, delay: float | None = None) -> None: ...

	async def press(self, key: str, delay: float | None = None, text: str | None = None) -> None: ...


class FrameProtocol(Protocol):
	@property
	def id(self) -> str: ...

	@property
	def page(self) -> 'PageProtocol': ...


class PageProtocol(Protocol):
	@property
	def mouse(self) -> MouseProtocol: ...

	@property
	def keyboard(self) -> KeyboardProtocol: ...

	@property
	def javascript_enabled(self) -> bool: ...

	def viewport(self) -> ViewportSize | None: ...

	async def set_viewport(self, viewport: ViewportSize) -> None: ...

	async def screenshot(self, clip: dict[str, float], **options: Any) -> bytes:
		"""Capture `clip`, given in document coordinates."""
		...

	def frame(self, frame_id: str) -> FrameProtocol | None: ...
