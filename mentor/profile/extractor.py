"""CV text extraction: PDF via pymupdf, DOCX via python-docx, plain text.

The engine only ever sees the resulting text, never the raw bytes.
"""

import io
import logging
import mimetypes
from pathlib import Path

from mentor.core.errors import UnsupportedFormatError

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
_TEXT_MIMES = {"application/json", "application/x-yaml", "application/yaml"}


def extract_text(data: bytes, mime_type: str) -> str:
    """Extract plain text from file bytes.

    Raises:
        UnsupportedFormatError: If the MIME type is not PDF, DOCX or text.
        ImportError: If the optional parser for the format is not installed.
    """
    mime = (mime_type or "").split(";")[0].strip().lower()
    if mime == PDF_MIME:
        return _extract_pdf(data)
    if mime == DOCX_MIME:
        return _extract_docx(data)
    if mime.startswith("text/") or mime in _TEXT_MIMES:
        return data.decode("utf-8", errors="replace")
    msg = f"Unsupported file format '{mime_type}'. Use PDF, DOCX or a text file (txt, md)."
    raise UnsupportedFormatError(msg)


def extract_file(path: str | Path) -> str:
    """Extract text from a file on disk, guessing its type from the name.

    Raises:
        FileNotFoundError: If the file does not exist.
        UnsupportedFormatError: If the format is not recognized.
    """
    path = Path(path)
    if not path.exists():
        msg = f"File not found: {path}"
        raise FileNotFoundError(msg)

    mime, _ = mimetypes.guess_type(path.name)
    if mime is None and path.suffix.lower() in {".md", ".markdown"}:
        mime = "text/markdown"
    text = extract_text(path.read_bytes(), mime or "")
    logger.info("Extracted %d characters from %s", len(text), path.name)
    return text


def _extract_pdf(data: bytes) -> str:
    try:
        import pymupdf
    except ImportError:
        msg = (
            "pymupdf is required for PDF extraction. "
            "Install with: pip install 'ua-tech-mentor[extract]'"
        )
        raise ImportError(msg) from None

    doc = pymupdf.open(stream=data, filetype="pdf")
    text_parts: list[str] = []
    for page in doc:
        text_parts.append(page.get_text())
    doc.close()

    return "\n".join(text_parts)


def _extract_docx(data: bytes) -> str:
    try:
        import docx
    except ImportError:
        msg = (
            "python-docx is required for DOCX extraction. "
            "Install with: pip install 'ua-tech-mentor[extract]'"
        )
        raise ImportError(msg) from None

    document = docx.Document(io.BytesIO(data))
    paragraphs = [p.text for p in document.paragraphs if p.text.strip()]
    return "\n".join(paragraphs)
