"""
In-page routines evaluated against element handles.

Routines that check a precondition return an error string (or false) instead of throwing,
so the caller can raise a typed error with the message.
"""

from functools import cache
from importlib import resources


@cache
def injected_script_source() -> str:
	return resources.files('page_bridge.dom').joinpath('injectedScript.js').read_text()


# Resolves with entries[0].intersectionRatio after the first IntersectionObserver callback
_VISIBLE_RATIO = """await new Promise(resolve => {
		const observer = new IntersectionObserver(entries => {
			resolve(entries[0].intersectionRatio);
			observer.disconnect();
		});
		observer.observe(element);
	})"""

SCROLL_INTO_VIEW_IF_NEEDED_JS = f"""async (element, pageJavascriptEnabled) => {{
	if (!element.isConnected)
		return 'Node is detached from document';
	if (element.nodeType !== Node.ELEMENT_NODE)
		return 'Node is not of type HTMLElement';
	// observers never fire on pages with javascript disabled
	if (!pageJavascriptEnabled) {{
		element.scrollIntoView({{block: 'center', inline: 'center', behavior: 'instant'}});
		return false;
	}}
	const visibleRatio = {_VISIBLE_RATIO};
	if (visibleRatio !== 1.0)
		element.scrollIntoView({{block: 'center', inline: 'center', behavior: 'instant'}});
	return false;
}}"""

IS_INTERSECTING_VIEWPORT_JS = f"""async element => {{
	const visibleRatio = {_VISIBLE_RATIO};
	return visibleRatio > 0;
}}"""

SCROLL_BY_JS = """(element, scrollX, scrollY) => {
	if (!element.ownerDocument || !element.ownerDocument.defaultView)
		return 'Node does not have a containing window';
	element.ownerDocument.defaultView.scrollBy(scrollX, scrollY);
	return false;
}"""

FOCUS_JS = 'element => element.focus()'

IS_MULTIPLE_JS = 'element => !!element.multiple'

QUERY_SELECTOR_JS = '(root, selector, injected) => injected.querySelector(selector, root)'

QUERY_SELECTOR_ALL_JS = '(root, selector, injected) => injected.querySelectorAll(selector, root)'

# Selects the current contents so the typed value replaces them
FILL_JS = """element => {
	if (element.nodeType !== Node.ELEMENT_NODE)
		return 'Node is not of type HTMLElement';
	const name = element.nodeName.toLowerCase();
	if (name === 'input') {
		const type = (element.getAttribute('type') || '').toLowerCase();
		const textInputTypes = new Set(['', 'email', 'number', 'password', 'search', 'tel', 'text', 'url']);
		if (!textInputTypes.has(type))
			return 'Cannot fill input of type "' + type + '".';
		if (element.disabled)
			return 'Cannot fill a disabled input.';
		if (element.readOnly)
			return 'Cannot fill a readonly input.';
		element.focus();
		element.select();
		return false;
	}
	if (name === 'textarea') {
		if (element.disabled)
			return 'Cannot fill a disabled textarea.';
		if (element.readOnly)
			return 'Cannot fill a readonly textarea.';
		element.focus();
		element.selectionStart = 0;
		element.selectionEnd = element.value.length;
		return false;
	}
	if (element.isContentEditable) {
		const range = element.ownerDocument.createRange();
		range.selectNodeContents(element);
		const selection = element.ownerDocument.defaultView.getSelection();
		selection.removeAllRanges();
		selection.addRange(range);
		element.focus();
		return false;
	}
	return 'Element is not an <input>, <textarea> or [contenteditable] element.';
}"""

SELECT_OPTIONS_JS = """(element, ...optionsToSelect) => {
	if (element.nodeName.toLowerCase() !== 'select')
		throw new Error('Element is not a <select> element.');
	const options = Array.from(element.options);
	element.value = undefined;
	for (let index = 0; index < options.length; index++) {
		const option = options[index];
		option.selected = optionsToSelect.some(optionToSelect => {
			if (optionToSelect instanceof Node)
				return option === optionToSelect;
			let matches = true;
			if (optionToSelect.value !== undefined)
				matches = matches && optionToSelect.value === option.value;
			if (optionToSelect.label !== undefined)
				matches = matches && optionToSelect.label === option.label;
			if (optionToSelect.index !== undefined)
				matches = matches && optionToSelect.index === index;
			return matches;
		});
		if (option.selected && !element.multiple)
			break;
	}
	element.dispatchEvent(new Event('input', { bubbles: true }));
	element.dispatchEvent(new Event('change', { bubbles: true }));
	return options.filter(option => option.selected).map(option => option.value);
}"""

SET_INPUT_FILES_JS = """async (element, payloads) => {
	const files = await Promise.all(payloads.map(async file => {
		const response = await fetch(`data:${file.mimeType};base64,${file.data}`);
		return new File([await response.blob()], file.name, { type: file.mimeType });
	}));
	const dataTransfer = new DataTransfer();
	for (const file of files)
		dataTransfer.items.add(file);
	element.files = dataTransfer.files;
	element.dispatchEvent(new Event('input', { bubbles: true }));
	element.dispatchEvent(new Event('change', { bubbles: true }));
}"""
