from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Annotated, Any, Union


class TemplateVersion(str, Enum):
    DUAL_OUTPUT = "dual_output"
    JSON_ONLY = "json_only"


class NoteInput(BaseModel):
    typed_text: str | None = None
    uploaded_bytes: bytes | None = None
    declared_media_type: str | None = None
    filename: str | None = None

    @property
    def has_upload(self) -> bool:
        return self.uploaded_bytes is not None


class PromptRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    note_text: str
    template_version: TemplateVersion = TemplateVersion.DUAL_OUTPUT

    def render(self) -> tuple[str, str]:
        # local import: prompts depends on this module for TemplateVersion
        from .prompts import render_prompt
        return render_prompt(self)


class CompletionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_text: str
    model: str


# --- interpreted completion ---

class Rejected(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["rejected"] = "rejected"
    message: str


class Structured(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["structured"] = "structured"
    json_text: str
    summary_text: str


class Unstructured(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unstructured"] = "unstructured"
    candidate_text: str


InterpretedOutcome = Annotated[Union[Rejected, Structured, Unstructured], Field(discriminator="kind")]


# --- HTTP envelopes ---

class GenerateResponse(BaseModel):
    output: str
    result: InterpretedOutcome
    parsed_json: Any | None = None
    model: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    provider: str
    model: str
    template_version: TemplateVersion
