"""Document parsers for various file formats.

Supports PDF, DOCX, TXT, and HTML documents. Parsers work on raw bytes so
the same code serves files read from disk and uploads received by the
HTTP service. Scanned images and legacy ``.doc`` files are accepted by the
upload validator but cannot be converted to text here.
"""

from __future__ import annotations

import io
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from .config import Settings
from .errors import DocumentValidationError, TextExtractionError

logger = logging.getLogger(__name__)

#: MIME type for each recognised extension.
_EXTENSION_TYPES: dict[str, str] = {
    ".txt": "text/plain",
    ".text": "text/plain",
    ".md": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}


@dataclass
class ParsedPage:
    """A single page of parsed content."""

    page_number: int
    text: str


@dataclass
class ParsedDocument:
    """Structured output from document parsing."""

    filename: str
    pages: list[ParsedPage] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    @property
    def full_text(self) -> str:
        """Concatenate all pages into a single text string."""
        return "\n\n".join(page.text for page in self.pages)

    @property
    def page_count(self) -> int:
        return len(self.pages)


class DocumentParser(ABC):
    """Abstract base class for document parsers.

    All parsers implement ``parse``, which takes the raw file bytes and
    returns a ``ParsedDocument``.
    """

    supported_extensions: tuple[str, ...] = ()
    supported_types: tuple[str, ...] = ()

    def accepts_type(self, content_type: str | None) -> bool:
        return bool(content_type) and content_type in self.supported_types

    def accepts_extension(self, filename: str) -> bool:
        return PurePath(filename).suffix.lower() in self.supported_extensions

    @abstractmethod
    def parse(self, data: bytes, filename: str) -> ParsedDocument:
        """Parse document bytes.

        Raises:
            TextExtractionError: If the content is corrupted or unreadable.
        """
        ...


class TextParser(DocumentParser):
    """Parser for plain text files.

    Splits on form-feed characters (``\\f``) into pages if present.
    """

    supported_extensions = (".txt", ".text", ".md")
    supported_types = ("text/plain",)

    #: Tried in order; latin-1 decodes any byte sequence.
    encodings = ("utf-8", "cp1252", "latin-1")

    def parse(self, data: bytes, filename: str) -> ParsedDocument:
        text, encoding = self.decode(data)
        raw_pages = text.split("\f") if "\f" in text else [text]

        pages = [
            ParsedPage(page_number=i + 1, text=page_text.strip())
            for i, page_text in enumerate(raw_pages)
            if page_text.strip()
        ]
        if not pages:
            pages = [ParsedPage(page_number=1, text="")]

        return ParsedDocument(
            filename=filename,
            pages=pages,
            metadata={"format": "text", "encoding": encoding},
        )

    def decode(self, data: bytes) -> tuple[str, str]:
        for encoding in self.encodings:
            try:
                return data.decode(encoding), encoding
            except UnicodeDecodeError:
                continue
        raise TextExtractionError("Unable to decode text file")


class PDFParser(DocumentParser):
    """Parser for PDF documents using pdfplumber."""

    supported_extensions = (".pdf",)
    supported_types = ("application/pdf",)

    def parse(self, data: bytes, filename: str) -> ParsedDocument:
        import pdfplumber

        pages = []
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                for i, page in enumerate(pdf.pages):
                    text = page.extract_text() or ""
                    pages.append(ParsedPage(page_number=i + 1, text=text.strip()))
        except Exception as exc:
            raise TextExtractionError(f"Could not read PDF '{filename}': {exc}") from exc

        return ParsedDocument(filename=filename, pages=pages, metadata={"format": "pdf"})


class DOCXParser(DocumentParser):
    """Parser for Microsoft Word DOCX files using python-docx.

    Body paragraphs come first, followed by table rows with cells joined by
    `` | ``. DOCX has no native page boundaries, so the result is one page.
    """

    supported_extensions = (".docx",)
    supported_types = ("application/vnd.openxmlformats-officedocument.wordprocessingml.document",)

    def parse(self, data: bytes, filename: str) -> ParsedDocument:
        from docx import Document

        try:
            doc = Document(io.BytesIO(data))
        except Exception as exc:
            raise TextExtractionError(f"Could not read DOCX '{filename}': {exc}") from exc

        blocks = [p.text for p in doc.paragraphs if p.text.strip()]
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    blocks.append(" | ".join(cells))

        metadata: dict = {"format": "docx", "paragraph_count": len(doc.paragraphs)}
        props = doc.core_properties
        if props.title:
            metadata["title"] = props.title
        if props.author:
            metadata["author"] = props.author

        return ParsedDocument(
            filename=filename,
            pages=[ParsedPage(page_number=1, text="\n\n".join(blocks))],
            metadata=metadata,
        )


class HTMLParser(DocumentParser):
    """Parser for HTML documents.

    Strips tags and extracts readable text with the standard library's
    ``html.parser``.
    """

    supported_extensions = (".html", ".htm")
    supported_types = ("text/html",)

    def parse(self, data: bytes, filename: str) -> ParsedDocument:
        raw_html, _encoding = TextParser().decode(data)
        text = self._strip_html(raw_html)
        return ParsedDocument(
            filename=filename,
            pages=[ParsedPage(page_number=1, text=text.strip())],
            metadata={"format": "html"},
        )

    @staticmethod
    def _strip_html(html: str) -> str:
        """Remove HTML tags and decode entities to produce plain text."""
        import html as html_module
        from html.parser import HTMLParser as StdHTMLParser

        class _TextExtractor(StdHTMLParser):
            def __init__(self) -> None:
                super().__init__()
                self.parts: list[str] = []
                self._skip = False

            def handle_starttag(self, tag: str, attrs: list) -> None:
                if tag in ("script", "style", "head"):
                    self._skip = True

            def handle_endtag(self, tag: str) -> None:
                if tag in ("script", "style", "head"):
                    self._skip = False
                if tag in ("p", "div", "br", "h1", "h2", "h3", "h4", "h5", "h6", "li", "tr"):
                    self.parts.append("\n\n" if tag in ("p", "div") else "\n")

            def handle_data(self, data: str) -> None:
                if not self._skip:
                    self.parts.append(data)

        extractor = _TextExtractor()
        extractor.feed(html)
        text = html_module.unescape("".join(extractor.parts))
        return re.sub(r"\n{3,}", "\n\n", text)


_PARSERS: tuple[DocumentParser, ...] = (PDFParser(), DOCXParser(), TextParser(), HTMLParser())

_LEGACY_DOC_MESSAGE = "Legacy .doc files are not supported; save as .docx or PDF"


def get_parser(filename: str, content_type: str | None = None) -> DocumentParser:
    """Get the parser for a file from its MIME type or extension.

    A declared MIME type takes precedence: an upload sent as ``text/html``
    is parsed as HTML whatever its filename says. The extension is only
    consulted when no parser accepts the type.

    Raises:
        TextExtractionError: If the format cannot be converted to text
            (scanned images, legacy ``.doc``, unknown extensions).
    """
    for parser in _PARSERS:
        if parser.accepts_type(content_type):
            return parser

    if content_type and content_type.startswith("image/"):
        raise TextExtractionError("Text extraction from images (OCR) is not supported")
    if content_type == "application/msword":
        raise TextExtractionError(_LEGACY_DOC_MESSAGE)

    for parser in _PARSERS:
        if parser.accepts_extension(filename):
            return parser

    if PurePath(filename).suffix.lower() == ".doc":
        raise TextExtractionError(_LEGACY_DOC_MESSAGE)

    supported = sorted({ext for p in _PARSERS for ext in p.supported_extensions})
    raise TextExtractionError(
        f"No parser available for '{filename}'. Supported formats: {', '.join(supported)}"
    )


def guess_content_type(filename: str) -> str:
    """MIME type for *filename* from its extension, ``text/plain`` if unknown."""
    return _EXTENSION_TYPES.get(PurePath(filename).suffix.lower(), "text/plain")


def validate_upload(
    filename: str | None,
    content_type: str | None,
    size: int,
    settings: Settings | None = None,
) -> None:
    """Reject uploads the service will not analyze.

    Raises:
        DocumentValidationError: Missing file, disallowed MIME type, or a
            size above ``settings.max_file_size``.
    """
    settings = settings or Settings()
    if not filename:
        raise DocumentValidationError("File is required")
    if content_type not in settings.allowed_file_types:
        raise DocumentValidationError("Unsupported file type")
    if size > settings.max_file_size:
        limit_mb = settings.max_file_size // (1024 * 1024)
        raise DocumentValidationError(f"File size exceeds {limit_mb}MB limit")


def extract_text(data: bytes, filename: str, content_type: str | None = None) -> str:
    """Convert document bytes to plain text.

    Raises:
        TextExtractionError: If the format is unsupported or unreadable, or
            no text could be extracted.
    """
    parser = get_parser(filename, content_type)
    parsed = parser.parse(data, filename)
    text = parsed.full_text
    logger.debug(
        "Extracted %d characters from %s (%d page(s), %s)",
        len(text),
        filename,
        parsed.page_count,
        parser.__class__.__name__,
    )
    if not text.strip():
        raise TextExtractionError(f"No text could be extracted from '{filename}'")
    return text


def read_document(path: str | Path) -> str:
    """Read a document from disk and return its text.

    Raises:
        FileNotFoundError: If the file does not exist.
        TextExtractionError: If the file cannot be converted to text.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    content_type = _EXTENSION_TYPES.get(path.suffix.lower())
    return extract_text(path.read_bytes(), path.name, content_type)
