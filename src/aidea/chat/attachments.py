"""Files attached to an outgoing message.

Hides how attachments are read: PDFs are reduced to their text with
pypdf, images become base64 ``data:`` URLs.
"""

import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..memory.models import Attachments

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

AttachmentKind = Literal["image", "document"]


def _existing_file(path: str | Path) -> Path:
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")
    return file_path


def extract_pdf_text(path: str | Path) -> str:
    """Extract the text of every page, joined with newlines.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a readable PDF
    """
    file_path = _existing_file(path)
    try:
        reader = PdfReader(file_path)
        pages = [page.extract_text() or "" for page in reader.pages]
    except PdfReadError as e:
        raise ValueError(f"Could not read PDF {file_path.name}: {e}") from e

    logger.debug("Extracted %d page(s) from %s", len(pages), file_path.name)
    return "\n".join(pages)


def image_data_url(path: str | Path) -> str:
    """Encode an image file as a ``data:`` URL.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a supported image type
    """
    file_path = _existing_file(path)
    mime = IMAGE_MIME_TYPES.get(file_path.suffix.lower())
    if mime is None:
        guessed, _ = mimetypes.guess_type(file_path.name)
        if not guessed or not guessed.startswith("image/"):
            raise ValueError(f"Unsupported image type: {file_path.suffix or file_path.name}")
        mime = guessed

    encoded = base64.b64encode(file_path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


@dataclass
class StagedDocument:
    name: str
    text: str


class StagedAttachments:
    """Attachments waiting to go out with the next message.

    Holds at most one image and one document; staging another of the
    same kind replaces the previous one.
    """

    def __init__(self) -> None:
        self.image_ref: str | None = None
        self.image_name: str | None = None
        self.document: StagedDocument | None = None

    def stage_image(self, path: str | Path) -> str:
        """Stage an image file. Returns the file name."""
        self.image_ref = image_data_url(path)
        self.image_name = Path(path).name
        return self.image_name

    def stage_document(self, path: str | Path) -> str:
        """Stage a PDF file. Returns the file name."""
        text = extract_pdf_text(path)
        self.document = StagedDocument(name=Path(path).name, text=text)
        return self.document.name

    def remove(self, kind: AttachmentKind) -> None:
        if kind == "image":
            self.image_ref = None
            self.image_name = None
        elif kind == "document":
            self.document = None
        else:
            raise ValueError(f"Unknown attachment kind: {kind}")

    def clear(self) -> None:
        self.remove("image")
        self.remove("document")

    @property
    def is_empty(self) -> bool:
        return self.image_ref is None and self.document is None

    def snapshot(self) -> Attachments | None:
        """Freeze the staged files into message attachments (None if empty)."""
        if self.is_empty:
            return None
        return Attachments(
            image_ref=self.image_ref,
            document_name=self.document.name if self.document else None,
            document_excerpt=self.document.text if self.document else None,
        )
