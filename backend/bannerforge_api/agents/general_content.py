"""General content agent - platform-tailored copy from a free-text prompt"""

from typing import Optional
import logging

from pydantic import ValidationError

from bannerforge_api.agents.client import AgentError, OpenAIClient, openai_client
from bannerforge_api.agents.schemas import (
    CONTENT_RESPONSE_SCHEMA,
    GeneralContentInput,
    GeneralContentOutput,
)

logger = logging.getLogger(__name__)


GENERAL_CONTENT_SYSTEM_PROMPT = """You are a content creation expert who specializes in generating content for various platforms.

Based on the platform, generate appropriate content. The content should be engaging and tailored to the specified platform.

Blog: Generate a detailed and informative blog post based on the prompt.
Facebook: Generate an engaging Facebook post based on the prompt. Include a call to action.
X (Twitter): Generate a concise and direct tweet based on the prompt. Include relevant hashtags.
Telegram: Generate an informative and concise message for Telegram based on the prompt.

Return plain text (no HTML) in the "content" field."""


def build_user_message(request: GeneralContentInput) -> str:
    lines = [
        f"Prompt: {request.prompt}",
        f"Platform: {request.platform}",
    ]
    if request.external_link:
        lines.append("")
        lines.append(f"Incorporate this external link into the content: {request.external_link}")
    return "\n".join(lines)


async def generate_general_content(
    request: GeneralContentInput,
    client: Optional[OpenAIClient] = None,
) -> GeneralContentOutput:
    """
    Generate content for one platform.

    Raises:
        AgentError: Call failed or the reply does not match the output schema
    """
    client = client or openai_client
    result = await client.call_agent(
        system_prompt=GENERAL_CONTENT_SYSTEM_PROMPT,
        user_message=build_user_message(request),
        response_schema=CONTENT_RESPONSE_SCHEMA,
        agent_name="GeneralContent",
    )
    try:
        return GeneralContentOutput.model_validate(result)
    except ValidationError as e:
        logger.error(f"[GeneralContent] Output schema validation failed: {e}")
        raise AgentError(f"Generated content failed validation: {e}") from e
