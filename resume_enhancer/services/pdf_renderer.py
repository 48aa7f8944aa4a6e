"""
HTML to PDF rendering with headless Chromium.
"""
import logging

from playwright.async_api import async_playwright, Error as PlaywrightError

from resume_enhancer.core.exceptions import PdfRenderError

logger = logging.getLogger(__name__)

# A4 at 96 dpi
A4_VIEWPORT = {"width": 794, "height": 1123}
DEVICE_SCALE_FACTOR = 2
ZERO_MARGIN = {"top": "0", "right": "0", "bottom": "0", "left": "0"}
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class PdfRenderer:
    """
    Renders one HTML document per call in a fresh browser.

    Each call launches its own browser so concurrent requests never share a
    page, and the browser is closed whether or not rendering succeeds.
    """

    def __init__(self, playwright_factory=async_playwright):
        self.playwright_factory = playwright_factory

    async def render(self, html: str) -> bytes:
        try:
            async with self.playwright_factory() as playwright:
                browser = await playwright.chromium.launch(args=BROWSER_ARGS)
                try:
                    pdf_bytes = await self._print(browser, html)
                finally:
                    await browser.close()
        except PlaywrightError as e:
            logger.error(f"PDF rendering failed: {e}")
            raise PdfRenderError(f"PDF rendering failed: {e}") from e

        logger.info(f"Rendered PDF ({len(pdf_bytes)} bytes)")
        return pdf_bytes

    async def _print(self, browser, html: str) -> bytes:
        page = await browser.new_page(
            viewport=A4_VIEWPORT,
            device_scale_factor=DEVICE_SCALE_FACTOR,
        )
        await page.set_content(html, wait_until="networkidle")
        return await page.pdf(
            format="A4",
            print_background=True,
            margin=ZERO_MARGIN,
        )
