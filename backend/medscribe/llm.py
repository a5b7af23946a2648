import asyncio, logging
from typing import Protocol
import google.generativeai as genai
from google.generativeai.types import GenerationConfig

from .config import Settings
from .errors import ProviderError
from .prompts import BEGIN_JSON, END_JSON, BEGIN_SUMMARY, END_SUMMARY

logger = logging.getLogger(__name__)


class CompletionProvider(Protocol):
    name: str

    async def complete(self, system_prompt: str, user_prompt: str, model_id: str) -> str: ...


# --- local deterministic fallback so demo never blocks ---
_STUB_RECORD = """{
  "patient": {"age": 58, "sex": "male"},
  "chief_complaint": "Chest pain for 2 hours",
  "vitals": {"blood_pressure": "120/80 mmHg", "heart_rate": "88 bpm"},
  "diagnosis": [{"description": "Chest pain, unspecified", "icd10_ca": "R07.4"}],
  "medications": [{"name": "Acetylsalicylic acid", "dose": "162 mg", "route": "PO", "frequency": "once"}],
  "plan": "ECG and troponin, observe, reassess in 3 hours."
}"""

_STUB_SUMMARY = "58-year-old man with 2 hours of chest pain, vitals stable. Given ASA; ECG and troponin pending, reassess in 3 hours."


class StubProvider:
    name = "stub"

    def __init__(self, text: str | None = None):
        self.text = text if text is not None else (
            f"{BEGIN_JSON}\n{_STUB_RECORD}\n{END_JSON}\n{BEGIN_SUMMARY}\n{_STUB_SUMMARY}\n{END_SUMMARY}"
        )

    async def complete(self, system_prompt: str, user_prompt: str, model_id: str) -> str:
        return self.text


def _extract_text(resp) -> str | None:
    """
    Gemini 2.x sometimes returns no quick .text; pull from candidates/parts when needed.
    .text itself raises when the candidate has no parts (safety/finish_reason).
    """
    try:
        t = resp.text
    except (ValueError, AttributeError):
        t = None
    if t:
        return t
    cand = getattr(resp, "candidates", None)
    if cand:
        content = getattr(cand[0], "content", None)
        if content and getattr(content, "parts", None):
            joined = "".join(getattr(p, "text", "") for p in content.parts if getattr(p, "text", None))
            return joined or None
    return None


def _finish_reason(resp):
    cand = getattr(resp, "candidates", None)
    if not cand:
        return None
    return getattr(cand[0], "finish_reason", None)


class GeminiProvider:
    name = "gemini"

    def __init__(self, settings: Settings):
        if not settings.gemini_api_key:
            raise ValueError("GeminiProvider needs gemini_api_key")
        genai.configure(api_key=settings.gemini_api_key)
        self._cfg = GenerationConfig(
            temperature=settings.temperature,
            max_output_tokens=settings.max_output_tokens,
        )

    def _generate(self, system_prompt: str, user_prompt: str, model_id: str) -> str:
        model = genai.GenerativeModel(model_id, system_instruction=system_prompt)
        resp = model.generate_content([user_prompt], generation_config=self._cfg)
        txt = _extract_text(resp)
        if not txt:
            raise ProviderError(f"empty or blocked completion (finish_reason={_finish_reason(resp)})")
        return txt

    async def complete(self, system_prompt: str, user_prompt: str, model_id: str) -> str:
        # SDK call is blocking; keep it off the event loop
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._generate, system_prompt, user_prompt, model_id)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Gemini call failed: {e}") from e


def build_provider(settings: Settings) -> CompletionProvider:
    if settings.gemini_api_key:
        logger.info("Using Gemini completion provider, model=%s", settings.model_name)
        return GeminiProvider(settings)
    logger.warning("GEMINI_API_KEY not set; using stub completion provider")
    return StubProvider()
