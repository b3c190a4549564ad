from __future__ import annotations

import asyncio
import logging
from typing import Any, Self

from playwright.async_api import CDPSession, Page
from pydantic import BaseModel, ConfigDict, Field, InstanceOf, PrivateAttr
from uuid_extensions import uuid7str

from page_bridge.browser.input import PlaywrightKeyboard, PlaywrightMouse
from page_bridge.browser.views import ViewportSize
from page_bridge.config import CONFIG
from page_bridge.dom.element import ElementHandle
from page_bridge.runtime.handle import JSHandle
from page_bridge.runtime.service import ExecutionContext
from page_bridge.runtime.views import JSFunction
from page_bridge.utils import time_execution_async


class Frame:
	"""A frame of the page, known only by id. Holds the frame's main-world execution context while it is alive."""

	def __init__(self, frame_id: str, page: PageSession):
		self._id = frame_id
		self._page = page
		self._context: ExecutionContext | None = None
		self._context_ready = asyncio.Event()

	@property
	def id(self) -> str:
		return self._id

	@property
	def page(self) -> PageSession:
		return self._page

	@property
	def context(self) -> ExecutionContext | None:
		return self._context

	def bind_context(self, context: ExecutionContext) -> None:
		self._context = context
		self._context_ready.set()

	def unbind_context(self) -> None:
		self._context = None
		self._context_ready.clear()

	async def wait_for_context(self, timeout: float | None = None) -> ExecutionContext:
		"""Wait until the frame has a live main-world context (e.g. after a navigation replaced the old one)."""
		while self._context is None or self._context.destroyed:
			try:
				await asyncio.wait_for(self._context_ready.wait(), timeout=timeout)
			except TimeoutError as e:
				raise TimeoutError(f'Frame {self._id} has no execution context after {timeout}s') from e
			if self._context is not None and self._context.destroyed:
				self.unbind_context()
		return self._context

	def __repr__(self) -> str:
		return f'<Frame {self._id} context={self._context!r}>'


class PageSession(BaseModel):
	"""
	Binds a Playwright page to the execution contexts the browser reports for it over CDP.

	Usage:
		async with PageSession(page=page) as session:
			button = await session.query_selector('button')
			await button.click()
	"""

	model_config = ConfigDict(
		extra='forbid',
		arbitrary_types_allowed=True,
		validate_by_alias=True,
		validate_by_name=True,
	)

	id: str = Field(default_factory=uuid7str)
	page: InstanceOf[Page] = Field(description='Playwright Page to bind to', exclude=True)
	javascript_enabled: bool = Field(
		default_factory=lambda: CONFIG.PAGE_BRIDGE_JAVASCRIPT_ENABLED,
		description='Whether scripts run on the page; when off, scroll-into-view scrolls unconditionally',
	)

	_cdp_session: CDPSession | None = PrivateAttr(default=None)
	_contexts: dict[int, ExecutionContext] = PrivateAttr(default_factory=dict)
	_frames: dict[str, Frame] = PrivateAttr(default_factory=dict)
	_main_frame_id: str | None = PrivateAttr(default=None)
	_mouse: PlaywrightMouse | None = PrivateAttr(default=None)
	_keyboard: PlaywrightKeyboard | None = PrivateAttr(default=None)
	_logger: logging.Logger | None = PrivateAttr(default=None)

	@property
	def logger(self) -> logging.Logger:
		if self._logger is None:
			self._logger = logging.getLogger(f'page_bridge.{self}')
		return self._logger

	def __str__(self) -> str:
		return f'PageSession🅿 {self.id[-4:]}'

	def __repr__(self) -> str:
		state = 'attached' if self._cdp_session else 'detached'
		return f'PageSession🅿 {self.id[-4:]} ({state}, contexts={len(self._contexts)}, frames={len(self._frames)})'

	# region - Lifecycle

	async def start(self) -> Self:
		if self._cdp_session is not None:
			return self

		cdp_session = await self.page.context.new_cdp_session(self.page)
		cdp_session.on('Runtime.executionContextCreated', self._on_execution_context_created)
		cdp_session.on('Runtime.executionContextDestroyed', self._on_execution_context_destroyed)
		cdp_session.on('Runtime.executionContextsCleared', self._on_execution_contexts_cleared)
		self._cdp_session = cdp_session

		frame_tree = await cdp_session.send('Page.getFrameTree')
		self._main_frame_id = frame_tree['frameTree']['frame']['id']
		self._frames[self._main_frame_id] = Frame(self._main_frame_id, self)

		await cdp_session.send('Runtime.enable')
		self.logger.debug(f'🔌 Attached to main frame {self._main_frame_id}')
		return self

	async def stop(self) -> None:
		if self._cdp_session is None:
			return

		self._on_execution_contexts_cleared()
		cdp_session, self._cdp_session = self._cdp_session, None
		try:
			await cdp_session.detach()
		except Exception as e:
			# the page may already be closed
			self.logger.debug(f'Failed to detach CDP session: {type(e).__name__}: {e}')
		self._frames.clear()
		self._main_frame_id = None
		self._keyboard = None
		self.logger.debug('🔌 Detached')

	async def __aenter__(self) -> PageSession:
		return await self.start()

	async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
		await self.stop()

	# endregion

	# region - CDP events

	def _on_execution_context_created(self, params: dict[str, Any]) -> None:
		payload = params['context']
		aux_data = payload.get('auxData') or {}
		frame_id = aux_data.get('frameId')

		frame = None
		if frame_id:
			frame = self._frames.get(frame_id)
			if frame is None:
				frame = self._frames[frame_id] = Frame(frame_id, self)

		context = ExecutionContext(self._cdp_session, payload, frame)
		self._contexts[context.context_id] = context
		if frame is not None and aux_data.get('isDefault'):
			frame.bind_context(context)
		self.logger.debug(f'🆕 {context!r} in frame {frame_id}')

	def _on_execution_context_destroyed(self, params: dict[str, Any]) -> None:
		context = self._contexts.pop(params['executionContextId'], None)
		if context is None:
			return
		context.mark_destroyed()
		if context.frame is not None and context.frame.context is context:
			context.frame.unbind_context()

	def _on_execution_contexts_cleared(self, params: dict[str, Any] | None = None) -> None:
		for context in self._contexts.values():
			context.mark_destroyed()
		self._contexts.clear()
		for frame in self._frames.values():
			frame.unbind_context()

	# endregion

	# region - Page collaborator surface

	@property
	def mouse(self) -> PlaywrightMouse:
		if self._mouse is None:
			self._mouse = PlaywrightMouse(self.page.mouse)
		return self._mouse

	@property
	def keyboard(self) -> PlaywrightKeyboard:
		if self._keyboard is None:
			self._keyboard = PlaywrightKeyboard(self.page.keyboard, self._cdp_session)
		return self._keyboard

	def viewport(self) -> ViewportSize | None:
		return self.page.viewport_size

	async def set_viewport(self, viewport: ViewportSize) -> None:
		await self.page.set_viewport_size({'width': viewport['width'], 'height': viewport['height']})

	async def screenshot(self, clip: dict[str, float], **options: Any) -> bytes:
		# clip is in document coordinates, which Playwright only honours for full page captures
		return await self.page.screenshot(clip=clip, **{**options, 'full_page': True})

	def frame(self, frame_id: str) -> Frame | None:
		return self._frames.get(frame_id)

	# endregion

	# region - Conveniences

	@property
	def main_frame(self) -> Frame:
		if self._main_frame_id is None:
			raise RuntimeError(f'{self} is not started, call start() first')
		return self._frames[self._main_frame_id]

	async def main_context(self) -> ExecutionContext:
		return await self.main_frame.wait_for_context(timeout=CONFIG.PAGE_BRIDGE_CONTEXT_TIMEOUT)

	async def evaluate(self, page_function: str | JSFunction, *args: Any) -> Any:
		context = await self.main_context()
		return await context.evaluate(page_function, *args)

	async def evaluate_handle(self, page_function: str | JSFunction, *args: Any) -> JSHandle:
		context = await self.main_context()
		return await context.evaluate_handle(page_function, *args)

	async def _document(self) -> ElementHandle:
		handle = await self.evaluate_handle('document')
		document = handle.as_element()
		assert document is not None, f'document did not resolve to a node in {self.main_frame!r}'
		return document

	@time_execution_async('--query_selector')
	async def query_selector(self, selector: str) -> ElementHandle | None:
		async with await self._document() as document:
			return await document.query_selector(selector)

	@time_execution_async('--query_selector_all')
	async def query_selector_all(self, selector: str) -> list[ElementHandle]:
		async with await self._document() as document:
			return await document.query_selector_all(selector)

	# endregion
