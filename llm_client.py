"""Client for the text-generation service (OpenRouter, OpenAI-compatible API)"""
import logging
from typing import Optional

from openai import AsyncOpenAI
from openai import OpenAIError

import config
from wizard import GenerationFailed

logger = logging.getLogger(__name__)


class LLMClient:
    """Generates websites through an OpenAI-compatible chat completions endpoint"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        http_client=None
    ):
        self.client = AsyncOpenAI(
            api_key=api_key or config.OPENAI_API_KEY,
            base_url=base_url or config.OPENAI_BASE_URL,
            timeout=config.LLM_TIMEOUT,
            max_retries=0,
            http_client=http_client,
            default_headers={
                "HTTP-Referer": config.APP_URL,
                "X-Title": config.APP_TITLE,
            }
        )
        self.model = model or config.LLM_MODEL
        self.max_tokens = config.LLM_MAX_TOKENS
        self.temperature = config.LLM_TEMPERATURE

    async def generate_website(self, prompt: str) -> str:
        """Generate the HTML document for a synthesized request.

        A single attempt is made. Any failure, whether a transport error, a
        non-success status or a response without content, is raised as
        GenerationFailed.
        """
        logger.info(f"LLM request ({self.model}, {len(prompt)} chars)")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "user", "content": prompt}
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature
            )
        except OpenAIError as e:
            logger.error(f"LLM request failed: {e}")
            raise GenerationFailed(f"Request failed: {e}") from e
        except Exception as e:
            # e.g. a 200 response whose body is not JSON
            logger.error(f"Unexpected error during LLM request: {e}")
            raise GenerationFailed(f"Malformed response: {e}") from e

        choices = getattr(response, "choices", None)
        if not choices:
            logger.error("LLM response has no choices")
            raise GenerationFailed("Malformed response: no choices")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not content or not content.strip():
            logger.error("LLM response has no content")
            raise GenerationFailed("Malformed response: empty content")

        logger.info(f"LLM request succeeded ({len(content)} chars)")
        return content
