"""Entry point the workspace uses to reach the generation agents"""

from typing import List, Optional

from bannerforge_api.agents.amazon_content import generate_amazon_content
from bannerforge_api.agents.banner_ideas import generate_banner_ideas
from bannerforge_api.agents.client import OpenAIClient
from bannerforge_api.agents.general_content import generate_general_content
from bannerforge_api.agents.schemas import (
    AmazonContentInput,
    AmazonContentOutput,
    BannerIdeasInput,
    GeneralContentInput,
    GeneralContentOutput,
)
from bannerforge_api.models.schemas import BannerIdea


class ContentAgents:
    """Bundles the three agents around one OpenAI client (global one by default)"""

    def __init__(self, client: Optional[OpenAIClient] = None):
        self.client = client

    async def general_content(self, request: GeneralContentInput) -> GeneralContentOutput:
        return await generate_general_content(request, client=self.client)

    async def amazon_content(self, request: AmazonContentInput) -> AmazonContentOutput:
        return await generate_amazon_content(request, client=self.client)

    async def banner_ideas(self, request: BannerIdeasInput) -> List[BannerIdea]:
        return await generate_banner_ideas(request, client=self.client)
