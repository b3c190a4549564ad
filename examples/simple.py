"""
Open a page, find the first link and click it through an element handle.

uv run python examples/simple.py
"""

import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from playwright.async_api import async_playwright

from page_bridge import PageSession


async def main():
	async with async_playwright() as playwright:
		browser = await playwright.chromium.launch(headless=True)
		page = await browser.new_page()
		await page.goto('https://example.com')

		async with PageSession(page=page) as session:
			print('Title:', await session.evaluate('document.title'))

			link = await session.query_selector('a')
			if link is None:
				print('No link on the page')
			else:
				print('Link text:', await link.evaluate('a => a.textContent'))
				print('Clickable point:', await link.clickable_point())
				await link.click()
				await link.dispose()

		await browser.close()


if __name__ == '__main__':
	asyncio.run(main())
