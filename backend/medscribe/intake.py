import io, logging
from typing import Callable
from pypdf import PdfReader

from .errors import EmptyNote, ExtractionError, UnsupportedMediaType
from .models import NoteInput

logger = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain"
APPLICATION_PDF = "application/pdf"


def normalize_media_type(media_type: str | None) -> str:
    # "text/plain; charset=utf-8" -> "text/plain"
    return (media_type or "").split(";", 1)[0].strip().lower()


def accepted_media_types(allow_pdf: bool = True) -> frozenset[str]:
    return frozenset({TEXT_PLAIN, APPLICATION_PDF}) if allow_pdf else frozenset({TEXT_PLAIN})


def _extract_pdf(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        parts = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:  # pypdf raises a wide range of types on malformed input
        raise ExtractionError(f"unreadable PDF: {e}") from e
    return "\n".join(parts)


def extract_text(data: bytes, media_type: str) -> str:
    """Raw upload bytes -> text. Raises ExtractionError if the bytes can't be read as media_type."""
    mt = normalize_media_type(media_type)
    if mt == TEXT_PLAIN:
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ExtractionError(f"plain-text upload is not valid UTF-8: {e}") from e
    if mt == APPLICATION_PDF:
        return _extract_pdf(data)
    raise UnsupportedMediaType(media_type)


def resolve_note(
    note: NoteInput,
    allow_pdf: bool = True,
    extractor: Callable[[bytes, str], str] = extract_text,
) -> str:
    """
    Picks the note text for the prompt.

    An uploaded file wins over typed text whenever it extracts to non-blank
    text; typed text is only used when there is no file or the file is blank.
    """
    file_text = ""
    if note.has_upload:
        mt = normalize_media_type(note.declared_media_type)
        if mt not in accepted_media_types(allow_pdf):
            raise UnsupportedMediaType(note.declared_media_type)
        file_text = extractor(note.uploaded_bytes, mt)
        logger.debug("extracted %d chars from %s upload", len(file_text), mt)

    final = file_text if file_text.strip() else (note.typed_text or "")
    if not final.strip():
        raise EmptyNote()
    return final
