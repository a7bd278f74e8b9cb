"""
OpenAI API client
"""

import json
import re
from typing import Optional, Dict, Any, List
from openai import AsyncOpenAI
from tasq.config.settings import settings
from tasq.config.constants import OPENAI_MAX_TOKENS, OPENAI_TEMPERATURE
from tasq.utils.logger import logger


def extract_json(response: str) -> Dict[str, Any]:
    """
    Extract a JSON object from a model reply

    Args:
        response: Raw reply text (may be wrapped in markdown fences or prose)

    Returns:
        Parsed JSON object

    Raises:
        ValueError: If no JSON object can be parsed
    """
    if response is None:
        raise ValueError("Empty response from model")

    json_str = response.strip()
    if json_str.startswith("```json"):
        json_str = json_str[7:]
    if json_str.startswith("```"):
        json_str = json_str[3:]
    if json_str.endswith("```"):
        json_str = json_str[:-3]
    json_str = json_str.strip()

    if not json_str.startswith("{"):
        json_match = re.search(r'\{.*\}', json_str, re.DOTALL)
        if not json_match:
            raise ValueError(f"No JSON object in model response: {response[:100]}")
        json_str = json_match.group(0)

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse model response as JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise ValueError("Model response is not a JSON object")
    return parsed


class OpenAIClient:
    """Client for OpenAI API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        fallback_model: Optional[str] = None,
    ):
        """
        Initialize OpenAI client

        Args:
            api_key: API key (defaults to settings)
            model: Primary model (defaults to settings)
            fallback_model: Model retried once if the primary call fails
        """
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.fallback_model = fallback_model or settings.OPENAI_FALLBACK_MODEL
        self.logger = logger
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        # Created on first use so the app can start without a key
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=settings.OPENAI_BASE_URL)
        return self._client

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = OPENAI_TEMPERATURE,
        max_tokens: int = OPENAI_MAX_TOKENS,
        json_mode: bool = False,
    ) -> str:
        """
        Get chat completion from OpenAI

        Args:
            messages: List of message dictionaries with 'role' and 'content'
            model: Model to use (defaults to configured model)
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response
            json_mode: Ask the model for a JSON object reply

        Returns:
            Response text

        Raises:
            Exception: If API call fails on both models
        """
        model = model or self.model

        request_kwargs: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            request_kwargs["response_format"] = {"type": "json_object"}

        try:
            self.logger.debug(f"Calling OpenAI API with model {model}")

            response = await self.client.chat.completions.create(**request_kwargs)

            content = response.choices[0].message.content
            if content is None:
                raise ValueError("OpenAI API returned an empty message")
            self.logger.debug(f"OpenAI API response: {content[:100]}...")

            return content

        except Exception as e:
            self.logger.error(f"OpenAI API error: {e}")

            # Try fallback model if main model fails
            if self.fallback_model and model != self.fallback_model:
                self.logger.warning(f"Trying fallback model {self.fallback_model}")
                return await self.chat_completion(
                    messages=messages,
                    model=self.fallback_model,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    json_mode=json_mode,
                )

            raise
