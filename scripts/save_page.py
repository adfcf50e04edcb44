"""Save a rendered page so it can be annotated offline with ``main.py --html``."""

import sys
from pathlib import Path

from playwright.sync_api import sync_playwright

url = sys.argv[1]
target = Path(sys.argv[2] if len(sys.argv) > 2 else "page.html")
with sync_playwright() as p:
    browser = p.chromium.launch(headless=False)
    page = browser.new_page()
    page.goto(url, wait_until="domcontentloaded")
    input("Wait for the headlines to render, then press Enter here…")
    target.write_text(page.content(), encoding="utf-8")
    browser.close()
print(f"Saved {url} -> {target}")
