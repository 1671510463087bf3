"""
Answer synthesis from a question and a set of SharePoint list items.

Two mutually exclusive strategies, chosen once from configuration:

- GenerativeSynthesizer: sends the items as context to a completion model.
- LookupSynthesizer: returns the description of the first item whose title
  contains the question.

Neither raises: every failure ends as a fixed user-facing string.
"""

from abc import ABC, abstractmethod

from api.base_client import BaseAIClient
from config.config import Config, SynthesisMode
from models.graph import NO_DESCRIPTION, NO_TITLE, ListRecord
from utils.logger import get_logger

logger = get_logger(__name__)

NO_ANSWER_GENERATED = "No answer generated."
SYNTHESIS_ERROR = "Error processing your question."
NO_MATCH_FOUND = "No answer found."

PROMPT_TEMPLATE = """
Answer this question using the following SharePoint data.

Question: "{question}"

Context:
{context}

Answer:
"""


def format_record_line(record: ListRecord) -> str:
    return f"• {record.title or NO_TITLE}: {record.description or NO_DESCRIPTION}"


def build_context_block(records: list[ListRecord]) -> str:
    return "\n".join(format_record_line(r) for r in records)


def build_prompt(question: str, records: list[ListRecord]) -> str:
    """Embed the verbatim question and one line per record in the prompt template."""
    return PROMPT_TEMPLATE.format(question=question, context=build_context_block(records))


class BaseSynthesizer(ABC):
    mode: SynthesisMode

    @abstractmethod
    async def synthesize(self, question: str, records: list[ListRecord]) -> str:
        pass


class GenerativeSynthesizer(BaseSynthesizer):
    """Answers through a remote completion model."""

    mode = SynthesisMode.GENERATIVE

    def __init__(
        self,
        client: BaseAIClient,
        *,
        temperature: float = 0.3,
        max_tokens: int = 300,
        model: str | None = None,
    ):
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.model = model

    async def synthesize(self, question: str, records: list[ListRecord]) -> str:
        prompt = build_prompt(question, records)
        kwargs = {"temperature": self.temperature, "max_tokens": self.max_tokens}
        if self.model:
            kwargs["model"] = self.model

        try:
            response = await self.client.get_completion(prompt, **kwargs)
        except Exception as e:
            # clients are expected to return errors; this guards third-party ones
            logger.error(
                "Completion client raised",
                extra={"extra_fields": {"error_type": type(e).__name__, "error": str(e)}},
            )
            return SYNTHESIS_ERROR

        if response.is_error:
            return SYNTHESIS_ERROR

        return response.text or NO_ANSWER_GENERATED


class LookupSynthesizer(BaseSynthesizer):
    """Answers by case-sensitive substring match against item titles."""

    mode = SynthesisMode.LOOKUP

    async def synthesize(self, question: str, records: list[ListRecord]) -> str:
        for record in records:
            title = record.title
            if title and question in title:
                logger.info(
                    "Lookup matched list item",
                    extra={"extra_fields": {"item_id": record.id}},
                )
                return record.description or NO_DESCRIPTION
        return NO_MATCH_FOUND


def create_synthesizer(config: Config, client: BaseAIClient | None = None) -> BaseSynthesizer:
    """
    Build the synthesizer selected by ``config.SYNTHESIS_MODE``.

    Args:
        config: Application configuration
        client: Completion client for generative mode; built from config when omitted

    Raises:
        ValueError: Unknown mode, or generative mode without an OpenAI API key
    """
    mode = (config.SYNTHESIS_MODE or "").lower().strip()

    if mode == SynthesisMode.LOOKUP.value:
        return LookupSynthesizer()

    if mode == SynthesisMode.GENERATIVE.value:
        if client is None:
            from api.openai_client import OpenAIClient

            if not config.OPENAI_API_KEY:
                raise ValueError("OPENAI_API_KEY not found in environment variables")
            client = OpenAIClient(api_key=config.OPENAI_API_KEY, model_name=config.DEFAULT_OPENAI_MODEL)
        return GenerativeSynthesizer(
            client,
            temperature=config.COMPLETION_TEMPERATURE,
            max_tokens=config.COMPLETION_MAX_TOKENS,
        )

    raise ValueError(f"Unsupported SYNTHESIS_MODE: {mode}. Must be 'generative' or 'lookup'")
