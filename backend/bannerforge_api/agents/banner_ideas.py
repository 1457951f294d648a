"""Banner ideas agent - brainstorms banner concepts for a theme or product"""

from typing import List, Optional
import logging

from pydantic import ValidationError

from bannerforge_api.agents.client import AgentError, OpenAIClient, openai_client
from bannerforge_api.agents.schemas import (
    BANNER_IDEAS_RESPONSE_SCHEMA,
    BannerIdeasInput,
    BannerIdeasOutput,
)
from bannerforge_api.models.schemas import BannerIdea

logger = logging.getLogger(__name__)

IDEA_COUNT = 3

BANNER_IDEAS_SYSTEM_PROMPT = f"""Generate {IDEA_COUNT} creative and unique ideas for an advertising banner, based on the theme/product given by the user. For each idea include:
1. ideaName: A short name for the idea.
2. descriptionSuggestion: A brief, catchy description for the banner (max 20 words).
3. ctaSuggestion: Text for the call-to-action button (max 5 words).
4. visualConcept: A visual concept for the banner image (max 15 words).

Return the ideas in the "ideas" array."""


async def generate_banner_ideas(
    request: BannerIdeasInput,
    client: Optional[OpenAIClient] = None,
) -> List[BannerIdea]:
    """
    Brainstorm banner ideas.

    Returns whatever number of ideas the model produced (normally 3);
    an empty list is a valid result.
    """
    client = client or openai_client
    result = await client.call_agent(
        system_prompt=BANNER_IDEAS_SYSTEM_PROMPT,
        user_message=f'Theme/product: "{request.prompt}"',
        response_schema=BANNER_IDEAS_RESPONSE_SCHEMA,
        agent_name="BannerIdeas",
    )
    try:
        output = BannerIdeasOutput.model_validate(result)
    except ValidationError as e:
        logger.error(f"[BannerIdeas] Output schema validation failed: {e}")
        raise AgentError(f"Generated ideas failed validation: {e}") from e

    if len(output.ideas) != IDEA_COUNT:
        logger.warning(f"[BannerIdeas] Expected {IDEA_COUNT} ideas, got {len(output.ideas)}")
    return output.ideas
