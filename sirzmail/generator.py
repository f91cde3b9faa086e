import logging
import re
from typing import Any, Callable, Awaitable, Optional

from openai import OpenAI

from sirzmail.config import get_api_key, get_model
from sirzmail.models import EmailOptions, LoadingState
from sirzmail.utils import run_inline

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """
You are an expert email marketing developer and designer.
Your goal is to generate high-quality, responsive HTML email templates.

Rules:
1. Return ONLY the raw HTML code. Do not wrap it in markdown code blocks (no ```html).
2. Use inline CSS for all styling to ensure compatibility across email clients (Gmail, Outlook, etc.).
3. Use a max-width of 600px for the main container.
4. Make it responsive (use percentage widths where appropriate).
5. Use placeholder images from 'https://picsum.photos/width/height' where images are needed.
6. Ensure sufficient color contrast and professional typography.
7. Do not include <head> or <body> tags, just the container <div> or <table> wrapper that can be embedded.
8. Interpret the user's tone and audience requests to adjust the visual style (colors, fonts, spacing).
"""

TEMPERATURE = 0.7

MISSING_KEY_MESSAGE = "API Key is missing"
UPSTREAM_FAILURE_MESSAGE = "Failed to generate email template. Please try again."
UNEXPECTED_FAILURE_MESSAGE = "An unexpected error occurred"

_LEADING_FENCE = re.compile(r'^```html\s*')
_TRAILING_FENCE = re.compile(r'```$')


class GenerationError(Exception):
    """Generation failed; the message is safe to show to the user."""


def build_prompt(options: EmailOptions) -> str:
    email_type = getattr(options.type, 'value', options.type)
    return f"""
    Create an email template with the following specifications:
    - Type: {email_type}
    - Topic: {options.topic}
    - Target Audience: {options.audience}
    - Tone: {options.tone}
    - Context/Details: {options.additional_context}

    Make the design visually appealing and consistent with the requested tone.
    """


def strip_markdown_fences(text: str) -> str:
    """Remove a ```html fence the model sometimes adds despite the instructions."""
    text = _LEADING_FENCE.sub('', text)
    text = _TRAILING_FENCE.sub('', text)
    return text.strip()


class EmailGenerator:
    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self._client = client
        self._client_key: Optional[str] = None
        self._injected = client is not None
        self._model = model

    def _get_client(self) -> OpenAI:
        if self._injected:
            return self._client

        api_key = get_api_key()
        if not api_key:
            raise GenerationError(MISSING_KEY_MESSAGE)
        if self._client is None or api_key != self._client_key:
            self._client = OpenAI(api_key=api_key)
            self._client_key = api_key
        return self._client

    def generate(self, options: EmailOptions) -> str:
        """
        Generate an HTML email template for `options`.

        Raises:
            ValueError: options failed validation (the form should have caught it)
            GenerationError: missing credential or upstream failure
        """
        problem = options.validation_error()
        if problem:
            raise ValueError(problem)

        client = self._get_client()
        model = self._model or get_model()
        logger.info(f"Generating '{options.topic}' template with {model}")
        try:
            response = client.chat.completions.create(
                model=model,
                temperature=TEMPERATURE,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": build_prompt(options)},
                ],
            )
        except Exception as e:
            logger.error(f"OpenAI API error: {type(e).__name__}: {e}")
            raise GenerationError(UPSTREAM_FAILURE_MESSAGE) from e

        content = response.choices[0].message.content if response.choices else None
        return strip_markdown_fences(content or '')


class GenerationSession:
    """
    Loading state for the Generate button.

    Only one generation may be outstanding; a submission made while one is
    running is rejected rather than queued.
    """

    def __init__(
        self,
        generator: EmailGenerator,
        runner: Optional[Callable[..., Awaitable[Any]]] = None,
    ):
        self._generator = generator
        self._runner = runner or run_inline
        self.state = LoadingState.IDLE
        self.error: Optional[str] = None
        self._on_change: Optional[Callable[['GenerationSession'], None]] = None

    @property
    def busy(self) -> bool:
        return self.state is LoadingState.GENERATING

    def set_on_change(self, callback: Callable[['GenerationSession'], None]):
        self._on_change = callback

    async def submit(self, options: EmailOptions) -> Optional[str]:
        """Run one generation; returns the HTML, or None when rejected or failed."""
        if self.busy:
            logger.info("Generation already in progress; ignoring submission")
            return None

        self._set(LoadingState.GENERATING, None)
        try:
            html = await self._runner(self._generator.generate, options)
        except GenerationError as e:
            self._set(LoadingState.ERROR, str(e))
            return None
        except Exception as e:
            logger.exception(f"Unexpected generation failure: {e}")
            self._set(LoadingState.ERROR, UNEXPECTED_FAILURE_MESSAGE)
            return None

        self._set(LoadingState.SUCCESS, None)
        return html

    def dismiss_error(self):
        if self.error is not None:
            self.error = None
            self._notify()

    def _set(self, state: LoadingState, error: Optional[str]):
        self.state = state
        self.error = error
        self._notify()

    def _notify(self):
        if self._on_change:
            self._on_change(self)
