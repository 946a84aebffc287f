"""
Reference screenshot capture.

Captures a full-page desktop and mobile screenshot of a live store with
headless Chromium, for use as generator input. Run as:

    screenshop-capture https://example-store.com ./shots --label home
"""
import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from playwright.async_api import async_playwright

logger = logging.getLogger(__name__)

NAVIGATION_TIMEOUT_MS = 30000


@dataclass(frozen=True)
class Viewport:
    name: str
    width: int
    height: int
    is_mobile: bool = False
    device_scale_factor: float = 1


DESKTOP = Viewport("desktop", 1440, 900)
# iPhone 14 Pro
MOBILE = Viewport("mobile", 390, 844, is_mobile=True, device_scale_factor=3)


def screenshot_path(output_dir: Path, viewport: Viewport, label: Optional[str] = None) -> Path:
    stem = f"screenshot-{label}" if label else "screenshot"
    if viewport.is_mobile:
        stem += "-mobile"
    return output_dir / f"{stem}.png"


async def capture_reference_screenshots(
    url: str,
    output_dir: str,
    label: Optional[str] = None,
    timeout_ms: int = NAVIGATION_TIMEOUT_MS
) -> List[Path]:
    """
    Capture desktop and mobile screenshots of ``url``.

    Returns:
        Paths of the written PNG files, desktop first
    """
    target_dir = Path(output_dir).resolve()
    target_dir.mkdir(parents=True, exist_ok=True)

    written = []
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(
            headless=True,
            args=["--no-sandbox", "--disable-setuid-sandbox"]
        )
        try:
            for viewport in (DESKTOP, MOBILE):
                context = await browser.new_context(
                    viewport={"width": viewport.width, "height": viewport.height},
                    is_mobile=viewport.is_mobile,
                    device_scale_factor=viewport.device_scale_factor,
                    ignore_https_errors=True
                )
                try:
                    page = await context.new_page()
                    await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
                    path = screenshot_path(target_dir, viewport, label)
                    await page.screenshot(path=str(path), full_page=True)
                    logger.info(f"Captured {viewport.name} screenshot: {path}")
                    written.append(path)
                finally:
                    await context.close()
        finally:
            await browser.close()

    return written


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="screenshop-capture",
        description="Capture desktop and mobile reference screenshots of a store"
    )
    parser.add_argument("url", help="Page to capture")
    parser.add_argument("output_dir", help="Directory for the PNG files")
    parser.add_argument("--label", help="Added to the file names, e.g. 'home'")
    parser.add_argument(
        "--timeout",
        type=int,
        default=NAVIGATION_TIMEOUT_MS,
        help="Navigation timeout in milliseconds"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)

    paths = asyncio.run(
        capture_reference_screenshots(args.url, args.output_dir, args.label, args.timeout)
    )
    for path in paths:
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
