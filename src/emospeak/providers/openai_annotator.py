"""OpenAI-backed emotion annotator."""

import os
from collections.abc import AsyncIterator

from openai import AsyncOpenAI

from ..tts.errors import AnnotationError
from ..tts.markers import MARKER
from .base import Annotator

DEFAULT_MODEL = "gpt-4o-mini"

TAG_RULES = """\
You are a speech emotion annotator for the ElevenLabs v3 TTS engine.

Your task: insert audio tags into the input text to add natural prosody.

Available audio tags (square brackets, lowercase):
- Emotions: [happy], [excited], [sad], [angry], [curious], [calm], [nervous], [surprised], [sarcastic]
- Delivery: [whispers], [shouts], [laughs], [sighs], [slowly], [quickly]

Rules:
1. Analyze each sentence for its emotional tone and delivery
2. Insert tags BEFORE the sentence or phrase they apply to
3. Do NOT modify the original text content, only insert tags
4. Do NOT add any explanation, markdown, or wrapping; output ONLY the annotated text
5. Use emotion tags liberally but delivery tags sparingly
6. If the text is neutral with no clear emotional variation, still add [calm] at the start
"""

ANNOTATE_PROMPT = (
    TAG_RULES
    + """
Example input:
やったー！テストに合格した！でも、次の試験が心配だな…

Example output:
[excited] やったー！テストに合格した！ [nervous] でも、次の試験が心配だな…"""
)

STREAM_PROMPT = (
    TAG_RULES
    + f"""7. Split the output into short speech segments of one or two sentences and
   write the marker {MARKER} between consecutive segments
8. Never write {MARKER} anywhere else

Example input:
やったー！テストに合格した！でも、次の試験が心配だな…

Example output:
[excited] やったー！テストに合格した！{MARKER}[nervous] でも、次の試験が心配だな…"""
)


class OpenAIAnnotator(Annotator):
    """Annotates text with ElevenLabs audio tags using an OpenAI chat model."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        system_prompt: str | None = None,
    ) -> None:
        """Initialize the OpenAI annotator.

        Args:
            api_key: OpenAI API key. If not provided, reads from OPENAI_API_KEY.
            model: Chat model id (defaults to gpt-4o-mini)
            system_prompt: Replaces the built-in tag rules for both calls

        Raises:
            AnnotationError: If no API key is available
        """
        key = api_key or os.getenv("OPENAI_API_KEY")
        if not key:
            raise AnnotationError(
                "OpenAI API key not found. Set OPENAI_API_KEY environment "
                "variable or provide api_key parameter."
            )
        self._client = AsyncOpenAI(api_key=key)
        self.model = model or DEFAULT_MODEL
        self._system_prompt = system_prompt

    def _messages(self, prompt: str, text: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self._system_prompt or prompt},
            {"role": "user", "content": text},
        ]

    async def annotate(self, text: str) -> str:
        """Annotate text in a single request.

        Falls back to the original text when the model returns nothing.
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=self._messages(ANNOTATE_PROMPT, text),
            )
        except Exception as e:
            raise AnnotationError(f"Annotation request failed: {e}", e) from e

        content = response.choices[0].message.content if response.choices else None
        return content or text

    async def stream(self, text: str) -> AsyncIterator[str]:
        """Stream annotated tokens with [SEP] markers between segments."""
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=self._messages(STREAM_PROMPT, text),
                stream=True,
            )
            async for event in response:
                if not event.choices:
                    continue
                delta = event.choices[0].delta.content
                if delta:
                    yield delta
        except AnnotationError:
            raise
        except Exception as e:
            raise AnnotationError(f"Annotation stream failed: {e}", e) from e
