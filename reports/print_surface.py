"""
Print surfaces - where a rendered HTML report is presented for printing.
The export driver depends only on the PrintSurface interface.
"""

import logging
import shutil
import tempfile
import time
import webbrowser
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from reports.atomic_writer import write_text_atomic, AtomicWriteError


logger = logging.getLogger(__name__)


class PrintSurfaceError(Exception):
    """Raised when a print surface fails after it was opened."""
    pass


class PrintSurfaceUnavailable(PrintSurfaceError):
    """Raised when the environment cannot provide a print surface."""
    pass


# Triggers the platform print dialog once the page has loaded
PRINT_ON_LOAD_SCRIPT = '<script>window.addEventListener("load", function () { window.print(); });</script>'


class PrintSurface(ABC):
    """
    Presentation surface lifecycle: open → load → wait → print → close.

    close() must be safe to call in any state, including after a failed open().
    """

    @abstractmethod
    def open(self) -> None:
        """Acquire the surface. Raises PrintSurfaceUnavailable if it cannot be created."""

    @abstractmethod
    def load(self, html: str) -> None:
        """Hand the rendered document to the surface."""

    @abstractmethod
    def wait_until_loaded(self, timeout: float = 10.0) -> None:
        """Block until content is ready to print."""

    @abstractmethod
    def request_print(self) -> None:
        """Trigger the platform print flow once."""

    @abstractmethod
    def close(self) -> None:
        """Release the surface."""


class BrowserPrintSurface(PrintSurface):
    """
    Print through the system web browser.

    The document is spooled to a file with a print-on-load hook and opened
    in the default browser, which shows its print dialog once the page loads.
    """

    def __init__(self, spool_dir: Optional[Path] = None, browser: Optional[str] = None):
        self._spool_dir = Path(spool_dir) if spool_dir is not None else None
        self._browser_name = browser
        self._owns_spool_dir = False
        self._document_path: Optional[Path] = None
        self._html: Optional[str] = None
        self._controller = None

    @property
    def document_path(self) -> Optional[Path]:
        return self._document_path

    def open(self) -> None:
        try:
            self._controller = webbrowser.get(self._browser_name)
        except webbrowser.Error as e:
            raise PrintSurfaceUnavailable(f"No web browser available for printing: {e}") from e

        try:
            if self._spool_dir is None:
                self._spool_dir = Path(tempfile.mkdtemp(prefix='portfolio_print_'))
                self._owns_spool_dir = True
            else:
                self._spool_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PrintSurfaceUnavailable(f"Cannot create print spool directory: {e}") from e

    def load(self, html: str) -> None:
        if self._controller is None:
            raise PrintSurfaceError("Surface is not open")

        if '</body>' in html:
            html = html.replace('</body>', f'{PRINT_ON_LOAD_SCRIPT}\n</body>', 1)
        else:
            html = html + PRINT_ON_LOAD_SCRIPT

        document_path = self._spool_dir / 'portfolio_report.html'
        try:
            write_text_atomic(html, document_path)
        except AtomicWriteError as e:
            raise PrintSurfaceUnavailable(f"Cannot spool report for printing: {e}") from e

        self._document_path = document_path
        self._html = html

    def wait_until_loaded(self, timeout: float = 10.0) -> None:
        deadline = time.monotonic() + timeout
        while self._document_path is None or not self._document_path.exists():
            if time.monotonic() >= deadline:
                raise PrintSurfaceError("Report was not loaded before timeout")
            time.sleep(0.05)

    def request_print(self) -> None:
        if self._document_path is None:
            raise PrintSurfaceError("Nothing loaded to print")

        opened = self._controller.open(self._document_path.resolve().as_uri(), new=1)
        if not opened:
            raise PrintSurfaceUnavailable("Browser refused to open the report (blocked by environment)")

        logger.info("Opened %s for printing", self._document_path)

    def close(self) -> None:
        # The spooled file stays for the browser; only the handle is released
        self._controller = None
        self._html = None

    def cleanup(self) -> None:
        """Remove a spool directory created by this surface."""
        if self._owns_spool_dir and self._spool_dir is not None:
            shutil.rmtree(self._spool_dir, ignore_errors=True)
            self._spool_dir = None
            self._owns_spool_dir = False
