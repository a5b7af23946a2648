class MedScribeError(Exception):
    """Base for every error the API turns into an {"error": ...} body."""
    status_code = 500
    public_message = "Something went wrong when processing the note."

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.public_message)
        self.detail = detail


# --- client-caused (400) ---

class InputError(MedScribeError):
    status_code = 400


class EmptyNote(InputError):
    public_message = "No note or file provided"


class UnsupportedMediaType(InputError):
    public_message = "Unsupported file type"

    def __init__(self, media_type: str | None):
        super().__init__(f"unsupported media type: {media_type!r}")
        self.media_type = media_type


class ExtractionError(InputError):
    public_message = "Could not read the uploaded file"


# --- dependency-caused (500) ---

class ProviderError(MedScribeError):
    pass
