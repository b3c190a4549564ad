from typing import TYPE_CHECKING

from page_bridge.logging_config import setup_logging

logger = setup_logging()

# Type stubs for lazy imports
if TYPE_CHECKING:
	from page_bridge.browser.session import Frame, PageSession
	from page_bridge.dom.element import ElementHandle
	from page_bridge.dom.views import BoundingBox, FilePayload, Point
	from page_bridge.runtime.handle import JSHandle
	from page_bridge.runtime.service import ExecutionContext
	from page_bridge.runtime.views import JSBigInt, JSFunction

# Lazy imports mapping, playwright is only loaded when the browser binding is used
_LAZY_IMPORTS = {
	'PageSession': ('page_bridge.browser.session', 'PageSession'),
	'Frame': ('page_bridge.browser.session', 'Frame'),
	'ExecutionContext': ('page_bridge.runtime.service', 'ExecutionContext'),
	'JSHandle': ('page_bridge.runtime.handle', 'JSHandle'),
	'ElementHandle': ('page_bridge.dom.element', 'ElementHandle'),
	'JSFunction': ('page_bridge.runtime.views', 'JSFunction'),
	'JSBigInt': ('page_bridge.runtime.views', 'JSBigInt'),
	'Point': ('page_bridge.dom.views', 'Point'),
	'BoundingBox': ('page_bridge.dom.views', 'BoundingBox'),
	'FilePayload': ('page_bridge.dom.views', 'FilePayload'),
}


def __getattr__(name: str):
	"""Lazy import mechanism for the public classes."""
	if name in _LAZY_IMPORTS:
		module_path, attr_name = _LAZY_IMPORTS[name]
		try:
			from importlib import import_module

			module = import_module(module_path)
			attr = getattr(module, attr_name)
			# Cache the imported attribute in the module's globals
			globals()[name] = attr
			return attr
		except ImportError as e:
			raise ImportError(f'Failed to import {name} from {module_path}: {e}') from e

	raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
	'PageSession',
	'Frame',
	'ExecutionContext',
	'JSHandle',
	'ElementHandle',
	'JSFunction',
	'JSBigInt',
	'Point',
	'BoundingBox',
	'FilePayload',
]
