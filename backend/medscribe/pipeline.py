import logging

from .config import Settings
from .errors import ProviderError
from .interpreter import interpret
from .llm import CompletionProvider
from .models import CompletionResult, InterpretedOutcome
from .prompts import build_prompt

logger = logging.getLogger(__name__)


class NotePipeline:
    """Prompt -> one completion call -> interpreted outcome. No retries."""

    def __init__(self, settings: Settings, provider: CompletionProvider):
        self.settings = settings
        self.provider = provider

    async def run(self, note_text: str) -> tuple[CompletionResult, InterpretedOutcome]:
        system, user = build_prompt(note_text, self.settings.template_version).render()
        model = self.settings.model_name
        try:
            raw = await self.provider.complete(system, user, model)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"{self.provider.name} provider failed: {e}") from e
        if not isinstance(raw, str):
            raise ProviderError(f"{self.provider.name} provider returned {type(raw).__name__}, expected str")

        result = CompletionResult(raw_text=raw, model=model)
        outcome = interpret(raw)
        logger.info("completion interpreted as %s (%d chars)", outcome.kind, len(raw))
        return result, outcome
