"""OpenAI SDK wrapper used by every content agent"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Union

from openai import OpenAI

from bannerforge_api.core.config import settings
from bannerforge_api.models.errors import ApplicationError, ErrorCode

logger = logging.getLogger(__name__)


class AgentError(Exception):
    """Generation call failed or returned output that does not match its schema"""
    pass


class OpenAIClient:
    """
    Wrapper for the OpenAI API client.

    All agents call ``call_agent`` with their prompt and JSON schema; the
    model is asked for strict structured output and the parsed JSON is
    returned. One attempt per call: no retries.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 temperature: Optional[float] = None, timeout: Optional[float] = None):
        api_key = settings.openai_api_key if api_key is None else api_key
        if not api_key:
            logger.warning("OPENAI_API_KEY not set - content generation is disabled")
        self.model = model or settings.openai_model
        self.temperature = settings.openai_temperature if temperature is None else temperature
        self.timeout = timeout or settings.generation_timeout
        # SDK-level limit ends the HTTP request itself; one attempt, no SDK retries
        self.client = OpenAI(api_key=api_key, timeout=self.timeout, max_retries=0) if api_key else None

    async def call_agent(
        self,
        system_prompt: str,
        user_message: Union[str, Dict[str, Any]],
        response_schema: Dict[str, Any],
        agent_name: str = "Agent",
    ) -> Dict[str, Any]:
        """
        Call the chat completions API with a strict JSON schema.

        Args:
            system_prompt: System message
            user_message: Rendered prompt (dicts are sent as JSON)
            response_schema: JSON schema with a "title"; root must be an object
            agent_name: Used in log lines

        Returns:
            Parsed JSON object

        Raises:
            ApplicationError: If the API key is not configured
            AgentError: If the call fails or the reply is not valid JSON
        """
        if self.client is None:
            raise ApplicationError(
                code=ErrorCode.CONFIGURATION_ERROR,
                message="OpenAI API key not configured. Please set OPENAI_API_KEY in .env file."
            )

        if isinstance(user_message, dict):
            user_message = json.dumps(user_message, indent=2, ensure_ascii=False)

        schema_name = response_schema.get("title", "Response")
        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "temperature": self.temperature,
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": schema_name,
                    "schema": {k: v for k, v in response_schema.items() if k != "title"},
                    "strict": True,
                },
            },
        }

        logger.info(f"[{agent_name}] Calling {self.model} | schema: {schema_name} | prompt length: {len(user_message)} chars")
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(self.client.chat.completions.create, **kwargs),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"[{agent_name}] ✗ Timed out after {self.timeout}s")
            raise AgentError(f"Generation timed out after {self.timeout:.0f}s") from e
        except Exception as e:
            logger.error(f"[{agent_name}] ✗ OpenAI API call failed: {e}")
            raise AgentError(f"OpenAI API call failed: {e}") from e

        choice = response.choices[0]
        result_text = choice.message.content or ""
        usage = getattr(response, "usage", None)
        total_tokens = getattr(usage, "total_tokens", 0) if usage else 0
        logger.info(f"[{agent_name}] ✓ Response received ({total_tokens} tokens, {len(result_text)} chars)")

        if getattr(choice, "finish_reason", None) == "length":
            raise AgentError("Model hit output token limit. Response truncated.")

        try:
            result = json.loads(result_text)
        except json.JSONDecodeError as e:
            logger.error(f"[{agent_name}] ✗ JSON decode error: {e} | First 200 chars: {result_text[:200]}")
            raise AgentError(f"Failed to parse JSON response: {e}") from e

        if not isinstance(result, dict):
            raise AgentError(f"Expected a JSON object, got {type(result).__name__}")
        return result


# Global client instance
openai_client = OpenAIClient()
