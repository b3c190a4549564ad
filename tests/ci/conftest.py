"""
Pytest configuration for page-bridge CI tests.

Fixtures wire the fakes from tests/ci/mocks.py into an execution context and an element handle.
"""

import os

import pytest
from dotenv import load_dotenv

# Load environment variables before any imports
load_dotenv()

from page_bridge.dom.element import ElementHandle
from page_bridge.runtime.serializer import create_js_handle
from page_bridge.runtime.service import ExecutionContext
from tests.ci.mocks import FakeCDPSession, FakeFrame, FakePage, node_result


@pytest.fixture(autouse=True)
def setup_test_environment():
	"""
	Automatically set up test environment for all tests.
	"""
	original_env = {}
	test_env_vars = {
		'PAGE_BRIDGE_JAVASCRIPT_ENABLED': 'true',
		'PAGE_BRIDGE_CONTEXT_TIMEOUT': '2',
		'PAGE_BRIDGE_EVALUATION_SCRIPT_URL': '__page_bridge_evaluation_script__',
	}

	for key, value in test_env_vars.items():
		original_env[key] = os.environ.get(key)
		os.environ[key] = value

	yield

	# Restore original environment
	for key, value in original_env.items():
		if value is None:
			os.environ.pop(key, None)
		else:
			os.environ[key] = value


@pytest.fixture
def cdp_session() -> FakeCDPSession:
	return FakeCDPSession()


@pytest.fixture
def page() -> FakePage:
	return FakePage()


@pytest.fixture
def frame(page: FakePage) -> FakeFrame:
	main_frame = FakeFrame(id='main-frame', page=page)
	page.frames[main_frame.id] = main_frame
	return main_frame


@pytest.fixture
def context(cdp_session: FakeCDPSession, frame: FakeFrame) -> ExecutionContext:
	return ExecutionContext(cdp_session, {'id': 7, 'name': '', 'origin': 'http://localhost'}, frame)


@pytest.fixture
def worker_context(cdp_session: FakeCDPSession) -> ExecutionContext:
	"""A context without a frame, like a worker's."""
	return ExecutionContext(cdp_session, {'id': 8, 'name': 'worker', 'origin': 'http://localhost'})


@pytest.fixture
def element(context: ExecutionContext) -> ElementHandle:
	handle = create_js_handle(context, node_result('element-1')['result'])
	assert isinstance(handle, ElementHandle)
	return handle
