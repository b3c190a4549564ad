from typing import Any


class PageBridgeError(Exception):
	"""Base class for all page-bridge errors"""


class VisibilityError(PageBridgeError):
	"""The node is detached, hidden, zero-sized or not an element"""


class ContextDestroyedError(PageBridgeError):
	"""The execution context is gone, most likely because of a navigation"""

	def __init__(self, message: str = 'Execution context was destroyed, most likely because of a navigation.'):
		super().__init__(message)


class EvaluationError(PageBridgeError):
	"""A remote exception was thrown while evaluating JavaScript in the page."""

	def __init__(self, message: str, exception_details: dict[str, Any] | None = None):
		super().__init__(f'Evaluation failed: {message}')
		self.message = message
		self.exception_details = exception_details or {}


class UnserializableFunctionError(PageBridgeError):
	"""Function source could not be turned into a standalone expression"""


class HandleError(PageBridgeError):
	"""A handle was used where it is not valid"""


class CrossContextError(HandleError):
	"""A handle from one execution context was passed to another"""


class DisposedHandleError(HandleError):
	"""The handle was already disposed"""


class ScrollFailureError(PageBridgeError):
	"""A relative point could not be brought into the viewport"""


class TypeValidationError(PageBridgeError, TypeError):
	"""An argument has the wrong type for a form interaction"""


class MultipleFileInputError(PageBridgeError):
	"""More than one file was given to a non-multiple file input"""


class ElementStateError(PageBridgeError):
	"""An in-page precondition rejected the element (e.g. not fillable)"""


class ElementNotFoundError(PageBridgeError):
	"""No element matched the selector"""
