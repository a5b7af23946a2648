import os
from pathlib import Path
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .models import TemplateVersion

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


class Settings(BaseModel):
    """Process configuration, built once and handed to create_app()."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    gemini_api_key: str | None = None
    model_name: str = "gemini-2.0-flash"
    temperature: float = Field(0.2, ge=0.0, le=2.0)
    max_output_tokens: int = Field(2048, gt=0)
    template_version: TemplateVersion = TemplateVersion.DUAL_OUTPUT
    allow_pdf: bool = True
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(5000, gt=0, lt=65536)

    @property
    def provider_name(self) -> str:
        return "gemini" if self.gemini_api_key else "stub"

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None) -> "Settings":
        # project .env is looked up from the working directory, not the installed package
        path = dotenv_path or find_dotenv(usecwd=True)
        if path:
            load_dotenv(dotenv_path=path)
        origins = os.getenv("MEDSCRIBE_CORS_ORIGINS", "*")
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            model_name=os.getenv("MODEL_NAME", "gemini-2.0-flash"),
            temperature=float(os.getenv("MEDSCRIBE_TEMPERATURE", "0.2")),
            max_output_tokens=int(os.getenv("MEDSCRIBE_MAX_OUTPUT_TOKENS", "2048")),
            template_version=TemplateVersion(os.getenv("MEDSCRIBE_PROMPT_TEMPLATE", "dual_output")),
            allow_pdf=_env_bool("MEDSCRIBE_ALLOW_PDF", True),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
        )
