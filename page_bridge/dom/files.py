import base64
import logging
import mimetypes
from collections.abc import Iterable
from pathlib import Path

import anyio

from page_bridge.dom.views import FilePayload

logger = logging.getLogger(__name__)


async def load_files(files: Iterable[str | Path | FilePayload]) -> list[FilePayload]:
	"""Turn file paths into base64 payloads for an <input type=file>. Payloads pass through untouched."""
	payloads: list[FilePayload] = []
	for item in files:
		if isinstance(item, FilePayload):
			payloads.append(item)
			continue

		path = Path(item)
		content = await anyio.Path(path).read_bytes()
		mime_type, _ = mimetypes.guess_type(path.name)
		payloads.append(
			FilePayload(
				name=path.name,
				mime_type=mime_type or 'application/octet-stream',
				data=base64.b64encode(content).decode('utf-8'),
			)
		)
		logger.debug(f'📎 Loaded {path.name} ({len(content)} bytes, {mime_type or "unknown type"})')
	return payloads
