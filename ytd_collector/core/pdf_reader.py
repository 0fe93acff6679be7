"""PDF reader for publisher documents.

Pure Python + PyMuPDF. Documents arrive as bytes from the fetcher and are
never written to disk.
"""

import logging
from collections import defaultdict

import fitz  # PyMuPDF

from ytd_collector.core.config import PdfConfig
from ytd_collector.core.errors import ParseError
from ytd_collector.core.tokenizer import TokenStream

logger = logging.getLogger(__name__)


class PDFDocument:
    """In-memory PDF with text-layer access and page rasterization.

    Pages are 1-indexed throughout, matching how publishers describe them.
    """

    def __init__(self, data: bytes, name: str = "document.pdf"):
        """Open a PDF from raw bytes.

        Args:
            data: PDF file contents.
            name: Label used in log messages (usually the source URL).
        """
        self.name = name
        self._doc = fitz.open(stream=data, filetype="pdf")

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "document.pdf") -> "PDFDocument":
        return cls(data, name=name)

    @property
    def page_count(self) -> int:
        """Total number of pages in the document."""
        return len(self._doc)

    def _page(self, page_num: int) -> "fitz.Page":
        if page_num < 1 or page_num > self.page_count:
            raise IndexError(f"Page {page_num} out of range (1-{self.page_count}) in {self.name}")
        return self._doc[page_num - 1]

    def _spans(self, page_num: int) -> list[dict]:
        page_dict = self._page(page_num).get_text("dict")
        spans = []
        for block in page_dict.get("blocks", []):
            for line in block.get("lines", []):
                spans.extend(line.get("spans", []))
        return spans

    def text(self, page_num: int = 1) -> str:
        """Plain text layer of a page."""
        return self._page(page_num).get_text()

    def fragments(self, page_num: int = 1) -> list[str]:
        """Raw text fragments (spans) in document order."""
        return [span.get("text", "") for span in self._spans(page_num)]

    def tokens(self, page_num: int = 1) -> TokenStream:
        """Merged word tokens for a page (see tokenizer.py)."""
        return TokenStream(self.fragments(page_num))

    def rows(self, page_num: int = 1) -> list[str]:
        """Reconstruct visual rows from positioned spans.

        Spans are grouped by rounded baseline, rows ordered top to bottom,
        spans left to right. A space is inserted only where the horizontal
        gap between spans exceeds PdfConfig.WORD_GAP, so glyph-per-span
        fonts come back as whole words.
        """
        grouped: dict[float, list[tuple[float, float, str]]] = defaultdict(list)
        tolerance = PdfConfig.ROW_TOLERANCE
        for span in self._spans(page_num):
            text = span.get("text", "")
            if not text:
                continue
            x0, _, x1, _ = span["bbox"]
            baseline = span.get("origin", (x0, span["bbox"][3]))[1]
            key = round(baseline / tolerance) * tolerance
            grouped[key].append((x0, x1, text))

        rows = []
        # PyMuPDF's y axis grows downward, so ascending keys read top to bottom.
        for key in sorted(grouped):
            items = sorted(grouped[key], key=lambda item: item[0])
            parts: list[str] = []
            last_x1: float | None = None
            for x0, x1, text in items:
                if last_x1 is not None and x0 - last_x1 > PdfConfig.WORD_GAP:
                    parts.append(" ")
                parts.append(text)
                last_x1 = x1
            row = "".join(parts).strip()
            if row:
                rows.append(" ".join(row.split()))
        return rows

    def render_png(self, page_num: int = 1, dpi: int = PdfConfig.RENDER_DPI) -> bytes:
        """Rasterize a page to PNG bytes for the vision oracle."""
        pixmap = self._page(page_num).get_pixmap(dpi=dpi)
        logger.debug(f"Rendered {self.name} page {page_num} at {dpi} dpi ({pixmap.width}x{pixmap.height})")
        return pixmap.tobytes("png")

    def close(self):
        """Close the document."""
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    def __enter__(self):
        return self

    def __exit__(self, _exc_type, _exc_val, _exc_tb):
        self.close()
        return False


def open_pdf(source: str, data: bytes, name: str = "document.pdf") -> PDFDocument:
    """Open fetched bytes as a PDF, reporting garbage as a ParseError.

    Publishers sometimes answer a stale report URL with an HTML error page
    and a 200 status.
    """
    excerpt = data[:200].decode("latin-1")
    try:
        pdf = PDFDocument(data, name=name)
    except RuntimeError as exc:  # fitz.FileDataError and EmptyFileError
        raise ParseError(source, f"not a readable PDF: {name}", excerpt=excerpt) from exc
    if pdf.page_count == 0:
        pdf.close()
        raise ParseError(source, f"PDF has no pages: {name}", excerpt=excerpt)
    return pdf
