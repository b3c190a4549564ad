import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from playwright.async_api import Keyboard, Mouse

from page_bridge.browser.views import MODIFIERS, CDPSessionProtocol, Modifier

logger = logging.getLogger(__name__)

# Input.dispatchKeyEvent modifier bit field
MODIFIER_BITS: dict[Modifier, int] = {'Alt': 1, 'Control': 2, 'Meta': 4, 'Shift': 8}


class PlaywrightMouse:
	"""Mouse input through Playwright's page.mouse."""

	def __init__(self, mouse: Mouse):
		self._mouse = mouse

	async def move(self, x: float, y: float, **options: Any) -> None:
		await self._mouse.move(x, y, **options)

	async def click(self, x: float, y: float, **options: Any) -> None:
		await self._mouse.click(x, y, **options)

	async def dblclick(self, x: float, y: float, **options: Any) -> None:
		await self._mouse.dblclick(x, y, **options)

	async def tripleclick(self, x: float, y: float, **options: Any) -> None:
		await self._mouse.click(x, y, click_count=3, **options)


class PlaywrightKeyboard:
	"""
	Keyboard input through Playwright's page.keyboard.

	Keeps track of the modifier keys it holds down so pointer actions can apply a modifier set
	and put the previous one back afterwards. Delays are in milliseconds, as in Playwright.
	"""

	def __init__(self, keyboard: Keyboard, cdp_session: CDPSessionProtocol | None = None):
		self._keyboard = keyboard
		self._cdp_session = cdp_session
		self._modifiers: set[Modifier] = set()

	@property
	def modifiers(self) -> list[Modifier]:
		return [key for key in MODIFIERS if key in self._modifiers]

	async def ensure_modifiers(self, modifiers: Sequence[Modifier]) -> list[Modifier]:
		for modifier in modifiers:
			if modifier not in MODIFIERS:
				raise ValueError(f'Unknown modifier key "{modifier}"')

		previous = self.modifiers
		for key in MODIFIERS:
			needs_down = key in modifiers
			is_down = key in self._modifiers
			if needs_down and not is_down:
				await self._keyboard.down(key)
				self._modifiers.add(key)
			elif not needs_down and is_down:
				await self._keyboard.up(key)
				self._modifiers.discard(key)
		return previous

	def _modifier_mask(self) -> int:
		return sum(MODIFIER_BITS[key] for key in self._modifiers)

	async def send_characters(self, text: str) -> None:
		await self._keyboard.insert_text(text)

	async def type(self, text: str, delay: float | None = None) -> None:
		await self._keyboard.type(text, delay=delay)

	async def press(self, key: str, delay: float | None = None, text: str | None = None) -> None:
		if text is None:
			await self._keyboard.press(key, delay=delay)
			return

		# Playwright's down() always inserts the key's own character, so the override goes over CDP
		if self._cdp_session is None:
			raise RuntimeError(f'Pressing {key} with a text override needs a CDP session')

		event = {'key': key, 'modifiers': self._modifier_mask()}
		await self._cdp_session.send('Input.dispatchKeyEvent', {**event, 'type': 'keyDown', 'text': text, 'unmodifiedText': text})
		if delay:
			await asyncio.sleep(delay / 1000)
		await self._cdp_session.send('Input.dispatchKeyEvent', {**event, 'type': 'keyUp'})
		logger.debug(f'⌨️ Pressed {key} producing {text!r}')
