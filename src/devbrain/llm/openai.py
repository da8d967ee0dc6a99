"""OpenAI client with retry logic using the Responses API."""

import asyncio
import json
import logging

from openai import APIConnectionError, APIError, AsyncOpenAI, RateLimitError

from ..config import Settings
from ..entries.schema import AnalysisResult, EvaluationResult, PracticeChallenge
from ..utils import as_data_url
from .prompts import ANALYSIS_SYSTEM_PROMPT, CHALLENGE_SYSTEM_PROMPT, EVALUATION_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class OpenAIClient:
    """OpenAI API client using the Responses API with exponential backoff retry."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client = AsyncOpenAI(api_key=settings.openai_api_key)
        self.model = settings.openai_model

    async def _call_with_retry(
        self,
        input_content: str | list[dict],
        instructions: str,
        max_tokens: int = 4096,
    ) -> str:
        """Make API call with exponential backoff retry."""
        last_error: Exception = RuntimeError("No API call attempted")
        delay = self.settings.retry_base_delay

        if isinstance(input_content, str):
            input_preview = input_content[:100].replace("\n", " ")
            logger.debug(f"[LLM] Input text ({len(input_content)} chars): {input_preview}...")
        else:
            logger.debug(f"[LLM] Input: {len(input_content)} message(s) with images")

        logger.debug(f"[LLM] Model: {self.model}, max_tokens: {max_tokens}")

        for attempt in range(self.settings.max_retries):
            try:
                logger.debug(f"[LLM] API call attempt {attempt + 1}/{self.settings.max_retries}")
                response = await self.client.responses.create(
                    model=self.model,
                    instructions=instructions,
                    input=input_content,
                    max_output_tokens=max_tokens,
                    text={"format": {"type": "json_object"}},
                )
                output = response.output_text or ""
                response_preview = output[:100].replace("\n", " ")
                logger.debug(f"[LLM] Response ({len(output)} chars): {response_preview}...")
                logger.info(f"[LLM] API call successful on attempt {attempt + 1}")
                return output
            except (RateLimitError, APIError, APIConnectionError) as e:
                last_error = e
                logger.warning(f"[LLM] API error: {e}, retrying in {delay}s (attempt {attempt + 1})")
                await asyncio.sleep(delay)
                delay *= 2
            except Exception as e:
                # Don't retry on auth errors or unexpected exceptions
                logger.error(f"[LLM] Unrecoverable error: {type(e).__name__}: {e}")
                raise

        logger.error(f"[LLM] All {self.settings.max_retries} attempts failed")
        raise last_error

    def _parse_response(self, response: str) -> dict:
        """Parse JSON response with error handling."""
        try:
            data = json.loads(response)
        except json.JSONDecodeError as e:
            logger.error(f"[LLM] Failed to parse response as JSON: {e}")
            raise ValueError(f"LLM returned invalid JSON: {response[:200]}...") from e
        if not isinstance(data, dict):
            raise ValueError(f"LLM returned {type(data).__name__}, expected an object")
        return data

    def _build_analysis_input(self, text: str, images: list[str]) -> str | list[dict]:
        # Responses API requires 'json' in input when using json_object format
        prompt = f"Analyze the following technical notes and images.\n\nContent:\n{text}\n\nRespond in JSON format."
        if not images:
            return prompt

        content: list[dict] = [{"type": "input_text", "text": prompt}]
        for image in images:
            content.append({"type": "input_image", "image_url": as_data_url(image)})
        return [{"role": "user", "content": content}]

    async def analyze(self, text: str, images: list[str] | None = None) -> AnalysisResult:
        """Structure raw notes and screenshots into an analysis result."""
        images = images or []
        logger.info(f"[LLM] Analyzing text ({len(text)} chars) with {len(images)} image(s)")

        response = await self._call_with_retry(
            input_content=self._build_analysis_input(text, images),
            instructions=ANALYSIS_SYSTEM_PROMPT,
            max_tokens=8192,
        )
        result = AnalysisResult.model_validate(self._parse_response(response))
        logger.info(f"[LLM] Analysis produced '{result.title_suggestion}' [{result.suggested_category}]")
        return result

    async def generate_challenge(self, context: str) -> PracticeChallenge:
        """Generate one practice question for an entry."""
        logger.info(f"[LLM] Generating challenge ({len(context)} chars of context)")
        response = await self._call_with_retry(
            input_content=f"Knowledge entry:\n{context}\n\nRespond in JSON format.",
            instructions=CHALLENGE_SYSTEM_PROMPT,
            max_tokens=1024,
        )
        return PracticeChallenge.model_validate(self._parse_response(response))

    async def evaluate(self, context: str, question: str, answer: str) -> EvaluationResult:
        """Judge a practice answer against the entry context."""
        logger.info(f"[LLM] Evaluating answer ({len(answer)} chars)")
        response = await self._call_with_retry(
            input_content=(
                f"Context:\n{context}\n\nQuestion:\n{question}\n\n"
                f"Learner's answer:\n{answer}\n\nRespond in JSON format."
            ),
            instructions=EVALUATION_SYSTEM_PROMPT,
            max_tokens=2048,
        )
        result = EvaluationResult.model_validate(self._parse_response(response))
        logger.info(f"[LLM] Evaluation: correct={result.is_correct} score={result.score}")
        return result
