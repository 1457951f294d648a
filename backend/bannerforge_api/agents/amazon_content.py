"""Amazon content agent - marketing copy with the affiliate link embedded"""

from typing import Optional
import logging

from pydantic import ValidationError

from bannerforge_api.agents.client import AgentError, OpenAIClient, openai_client
from bannerforge_api.agents.schemas import (
    CONTENT_RESPONSE_SCHEMA,
    AmazonContentInput,
    AmazonContentOutput,
)

logger = logging.getLogger(__name__)


AMAZON_CONTENT_SYSTEM_PROMPT = """You are an expert marketing copywriter specializing in Amazon products.

You will generate marketing copy for the Amazon product described by the user. The marketing copy should be appropriate for the platform specified by the user.

The user will provide an affiliate link. You must embed this affiliate link into the marketing copy in a clear and appropriate way, such as in a call to action.

Return plain text (no HTML) in the "content" field."""


async def generate_amazon_content(
    request: AmazonContentInput,
    client: Optional[OpenAIClient] = None,
) -> AmazonContentOutput:
    """Generate affiliate copy for one product and platform"""
    client = client or openai_client
    user_message = (
        f"Platform: {request.platform}\n"
        f"Description: {request.prompt}\n"
        f"Affiliate Link: {request.affiliate_link}"
    )
    result = await client.call_agent(
        system_prompt=AMAZON_CONTENT_SYSTEM_PROMPT,
        user_message=user_message,
        response_schema=CONTENT_RESPONSE_SCHEMA,
        agent_name="AmazonContent",
    )
    try:
        return AmazonContentOutput.model_validate(result)
    except ValidationError as e:
        logger.error(f"[AmazonContent] Output schema validation failed: {e}")
        raise AgentError(f"Generated content failed validation: {e}") from e
