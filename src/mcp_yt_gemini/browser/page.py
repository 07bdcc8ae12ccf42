"""
Page surface of a Gemini tab: the two DOM touch points a delivery agent needs.

`PageSurface` is the contract; `SeleniumPage` implements it for one tab of a
`ChromeTabHost`. Each operation first points the driver at its tab because the
tab watcher moves the driver between tabs in the meantime.
"""

from typing import List, Optional

from selenium.webdriver.common.by import By
from selenium.common.exceptions import (
    ElementClickInterceptedException,
    StaleElementReferenceException,
)

from ..constants import EDITOR_SELECTOR, SEND_BUTTON_SELECTOR


# Replaces the composer content with one <p> per block (null -> <p><br></p>)
# and fires input/change so the app's own reactivity picks the text up.
WRITE_BLOCKS_JS = """
const editor = arguments[0];
const blocks = arguments[1];
const fragment = document.createDocumentFragment();
for (const line of blocks) {
    const paragraph = document.createElement("p");
    if (line === null) {
        paragraph.appendChild(document.createElement("br"));
    } else {
        paragraph.textContent = line;
    }
    fragment.appendChild(paragraph);
}
while (editor.firstChild) {
    editor.removeChild(editor.firstChild);
}
editor.appendChild(fragment);
editor.dispatchEvent(new Event("input", { bubbles: true }));
editor.dispatchEvent(new Event("change", { bubbles: true }));
"""


class PageSurface:
    """What a delivery agent can do to its page."""

    async def find_editor(self):
        """Return the composer element, or None if it is not mounted yet."""
        raise NotImplementedError

    async def write_blocks(self, editor, blocks: List[Optional[str]]) -> None:
        raise NotImplementedError

    async def find_send_button(self):
        """Return the send button element, or None."""
        raise NotImplementedError

    async def is_enabled(self, button) -> bool:
        raise NotImplementedError

    async def click(self, button) -> None:
        raise NotImplementedError


class SeleniumPage(PageSurface):
    def __init__(self, host, tab_id: str):
        self.host = host
        self.tab_id = tab_id

    @property
    def driver(self):
        return self.host.driver

    def _find_first(self, selector: str):
        self.host.switch_to(self.tab_id)
        elements = self.driver.find_elements(By.CSS_SELECTOR, selector)
        return elements[0] if elements else None

    async def find_editor(self):
        return self._find_first(EDITOR_SELECTOR)

    async def write_blocks(self, editor, blocks: List[Optional[str]]) -> None:
        self.host.switch_to(self.tab_id)
        self.driver.execute_script(WRITE_BLOCKS_JS, editor, list(blocks))

    async def find_send_button(self):
        return self._find_first(SEND_BUTTON_SELECTOR)

    async def is_enabled(self, button) -> bool:
        return button.get_attribute("aria-disabled") != "true"

    async def click(self, button) -> None:
        self.host.switch_to(self.tab_id)
        try:
            button.click()
        except ElementClickInterceptedException:
            self.driver.execute_script("arguments[0].click();", button)
        except StaleElementReferenceException:
            fresh = self._find_first(SEND_BUTTON_SELECTOR)
            if fresh is None:
                raise
            self.driver.execute_script("arguments[0].click();", fresh)


__all__ = ["PageSurface", "SeleniumPage", "WRITE_BLOCKS_JS"]
