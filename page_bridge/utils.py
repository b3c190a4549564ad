import logging
import math
import time
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from page_bridge.config import CONFIG

R = TypeVar('R')
P = ParamSpec('P')


def time_execution_async(
	additional_text: str = '',
) -> Callable[[Callable[P, Coroutine[Any, Any, R]]], Callable[P, Coroutine[Any, Any, R]]]:
	def decorator(func: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, Coroutine[Any, Any, R]]:
		@wraps(func)
		async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
			start_time = time.time()
			result = await func(*args, **kwargs)
			execution_time = time.time() - start_time
			# only log slow calls, every pointer action goes through here
			if execution_time > CONFIG.PAGE_BRIDGE_SLOW_CALL_THRESHOLD:
				self_has_logger = args and getattr(args[0], 'logger', None)
				if self_has_logger:
					logger = getattr(args[0], 'logger')
				else:
					logger = logging.getLogger(__name__)
				logger.debug(f'⏳ {additional_text.strip("-")}() took {execution_time:.2f}s')
			return result

		return wrapper

	return decorator


def format_js_value(value: Any) -> str:
	"""Render a Python value the way JavaScript's String() would print it."""
	if value is None:
		return 'undefined'
	if isinstance(value, bool):
		return 'true' if value else 'false'
	if isinstance(value, float):
		if math.isnan(value):
			return 'NaN'
		if math.isinf(value):
			return 'Infinity' if value > 0 else '-Infinity'
		if value.is_integer():
			return str(int(value))
	return str(value)
