"""Content generation panel

Three independent sub-flows (general content, Amazon content, banner
ideas), each with its own inputs, ``generating`` flag and last result.
A failed generation is reported and leaves the previous result in place.
"""

from typing import List, Optional
import logging

from bannerforge_api.agents.client import AgentError
from bannerforge_api.agents.content_agents import ContentAgents
from bannerforge_api.agents.schemas import AmazonContentInput, BannerIdeasInput, GeneralContentInput
from bannerforge_api.core.notifications import NotificationLog
from bannerforge_api.core.persistence import PersistenceFacade
from bannerforge_api.core.session_store import SessionStore
from bannerforge_api.core.shared_content import AI_CONTENT_PARAM, AMAZON_CONTENT_PARAM, PageLocation
from bannerforge_api.models.errors import ApplicationError, ErrorCode
from bannerforge_api.models.schemas import (
    AmazonContentRequest,
    BannerIdea,
    CamelModel,
    GeneralContentRequest,
    Platform,
    SharedAiContent,
    SharedAmazonContent,
    ShareResponse,
)
from bannerforge_api.utils.sanitization import safe_url, text_to_html

logger = logging.getLogger(__name__)

AMAZON_IMAGE_PLACEHOLDER = "https://placehold.co/200x200.png"

HEADER_STYLE = "font-size: 1.1em; font-weight: 600; color: #333; margin-bottom: 0.5em;"
TEXT_STYLE = "margin-bottom: 1em; line-height: 1.6;"
IMAGE_STYLE = "max-width: 100%; height: auto; border-radius: 8px; box-shadow: 0 4px 12px rgba(0,0,0,0.1);"
AMAZON_BUTTON_STYLE = (
    "display: inline-block; padding: 10px 20px; background-color: #FF9900; color: white; "
    "border-radius: 25px; text-decoration: none; font-weight: bold; font-size: 1em; "
    "box-shadow: 0 4px 15px rgba(255,153,0,0.4); transition: all 0.3s ease;"
)


# ============================================================================
# HTML composition
# ============================================================================

def _platform_header(platform: str) -> str:
    return f'<h4 style="{HEADER_STYLE}">Content for {platform.capitalize()}:</h4>'


def compose_general_html(content: str, image_url: Optional[str], platform: Platform) -> str:
    """Header, escaped text (newlines to <br />), then the optional image"""
    if not content and not image_url:
        return ""
    html = _platform_header(platform)
    if content:
        html += f'<div style="{TEXT_STYLE}">{text_to_html(content)}</div>'
    src = safe_url(image_url, fallback="") if image_url else ""
    if src:
        html += (
            f'<div style="margin-top: 1rem; text-align: center;">'
            f'<img src="{src}" alt="AI Generated Visual" style="{IMAGE_STYLE}" /></div>'
        )
    return html


def compose_amazon_html(
    content: str,
    product_image_url: Optional[str],
    affiliate_link: Optional[str],
    platform: Platform,
    image_failed: bool = False,
) -> str:
    """Header, product image, escaped text, then the "Buy on Amazon" button"""
    if not content:
        return ""
    html = _platform_header(platform)
    if product_image_url:
        src = AMAZON_IMAGE_PLACEHOLDER if image_failed else safe_url(product_image_url, fallback=AMAZON_IMAGE_PLACEHOLDER)
        html += (
            f'<div style="margin-bottom: 1rem; text-align: center;">'
            f'<img src="{src}" alt="Amazon Product Image" style="{IMAGE_STYLE} max-width: 200px; max-height: 200px; object-fit: contain;" />'
            f'</div>'
        )
    html += f'<div style="{TEXT_STYLE}">{text_to_html(content)}</div>'
    if affiliate_link:
        html += (
            f'<div style="margin-top: 1.5rem; text-align: center;">'
            f'<a href="{safe_url(affiliate_link)}" target="_blank" rel="noopener noreferrer" style="{AMAZON_BUTTON_STYLE}">Buy on Amazon</a>'
            f'</div>'
        )
    return html


# ============================================================================
# Sub-flow state
# ============================================================================

class GeneralContentState(CamelModel):
    prompt: str = ""
    platform: Platform = "blog"
    external_link: Optional[str] = None
    image_url: Optional[str] = None
    content: str = ""
    html_output: str = ""
    generating: bool = False


class AmazonContentState(CamelModel):
    prompt: str = ""
    affiliate_link: str = ""
    platform: Platform = "blog"
    product_image_url: Optional[str] = None
    content: str = ""
    html_output: str = ""
    image_failed: bool = False
    generating: bool = False


class BannerIdeasState(CamelModel):
    prompt: str = ""
    ideas: List[BannerIdea] = []
    generating: bool = False


class ContentGenerationPanel:
    """Generation and sharing of AI content for one workspace"""

    def __init__(
        self,
        agents: ContentAgents,
        session: SessionStore,
        persistence: PersistenceFacade,
        location: PageLocation,
        notifications: NotificationLog,
        share_base_url: Optional[str] = None,
    ):
        self.agents = agents
        self.session = session
        self.persistence = persistence
        self.location = location
        self.notifications = notifications
        self.share_base_url = share_base_url or None
        self.general = GeneralContentState()
        self.amazon = AmazonContentState()
        self.ideas = BannerIdeasState()

    def _reject(self, message: str):
        self.notifications.error("Error", message)
        raise ApplicationError(code=ErrorCode.VALIDATION_ERROR, message=message)

    def _generation_failed(self, message: str, error: Exception):
        logger.error(f"[ContentPanel] {message}: {error}")
        self.notifications.error("Error", message)
        return ApplicationError(code=ErrorCode.GENERATION_FAILED, message=message, retryable=True)

    # ------------------------------------------------------------------
    # General content
    # ------------------------------------------------------------------

    async def generate_general(self, request: GeneralContentRequest) -> GeneralContentState:
        state = self.general
        state.prompt = request.prompt
        state.platform = request.platform
        state.external_link = request.external_link or None
        state.image_url = request.image_url or None
        state.html_output = compose_general_html(state.content, state.image_url, state.platform)

        if not request.prompt.strip():
            self._reject("Please enter a prompt for content generation.")

        state.generating = True
        try:
            result = await self.agents.general_content(GeneralContentInput(
                prompt=request.prompt,
                platform=request.platform,
                external_link=state.external_link,
            ))
        except (AgentError, ApplicationError) as e:
            raise self._generation_failed("Failed to generate AI content.", e) from e
        finally:
            state.generating = False

        state.content = result.content
        state.html_output = compose_general_html(state.content, state.image_url, state.platform)
        logger.info(f"[ContentPanel] General content generated for {state.platform} ({len(state.content)} chars)")
        self.notifications.push("Success", "AI content generated!")
        return state

    async def share_general(self) -> ShareResponse:
        state = self.general
        if not state.content and not state.image_url:
            self._reject("No general AI content to share.")
        record = SharedAiContent(
            prompt=state.prompt,
            content=state.content,
            image_url=state.image_url or "",
            platform=state.platform,
            external_link=state.external_link,
            html_output=state.html_output,
        )
        return await self._share(record, AI_CONTENT_PARAM)

    def load_initial_general(self, record: SharedAiContent):
        """Pre-fill the general sub-flow from a shared record"""
        self.general = GeneralContentState(
            prompt=record.prompt,
            platform=record.platform,
            external_link=record.external_link,
            image_url=record.image_url or None,
            content=record.content,
        )
        # Recomposed rather than trusting the stored markup
        self.general.html_output = compose_general_html(record.content, self.general.image_url, record.platform)

    # ------------------------------------------------------------------
    # Amazon content
    # ------------------------------------------------------------------

    async def generate_amazon(self, request: AmazonContentRequest) -> AmazonContentState:
        state = self.amazon
        state.prompt = request.prompt
        state.affiliate_link = request.affiliate_link
        state.platform = request.platform
        if (request.product_image_url or None) != state.product_image_url:
            state.image_failed = False
        state.product_image_url = request.product_image_url or None
        self._refresh_amazon_html()

        if not request.prompt.strip():
            self._reject("Please enter a prompt for Amazon content.")
        if not request.affiliate_link.strip():
            self._reject("Please enter your Amazon affiliate link.")

        image_note = state.product_image_url or "No image provided."
        state.generating = True
        try:
            result = await self.agents.amazon_content(AmazonContentInput(
                prompt=f"Product: {request.prompt}. Image available at: {image_note}",
                affiliate_link=request.affiliate_link,
                platform=request.platform,
            ))
        except (AgentError, ApplicationError) as e:
            raise self._generation_failed("Failed to generate Amazon AI content.", e) from e
        finally:
            state.generating = False

        state.content = result.content
        self._refresh_amazon_html()
        logger.info(f"[ContentPanel] Amazon content generated for {state.platform} ({len(state.content)} chars)")
        self.notifications.push("Success", "Amazon AI content generated!")
        return state

    def mark_amazon_image_failed(self) -> AmazonContentState:
        self.amazon.image_failed = True
        self._refresh_amazon_html()
        return self.amazon

    def _refresh_amazon_html(self):
        state = self.amazon
        state.html_output = compose_amazon_html(
            state.content, state.product_image_url, state.affiliate_link, state.platform, state.image_failed
        )

    async def share_amazon(self) -> ShareResponse:
        state = self.amazon
        if not state.content:
            self._reject("No Amazon AI content to share.")
        record = SharedAmazonContent(
            prompt=state.prompt,
            content=state.content,
            product_image_url=state.product_image_url or "",
            affiliate_link=state.affiliate_link,
            platform=state.platform,
            html_output=state.html_output,
        )
        return await self._share(record, AMAZON_CONTENT_PARAM)

    def load_initial_amazon(self, record: SharedAmazonContent):
        """Pre-fill the Amazon sub-flow from a shared record"""
        self.amazon = AmazonContentState(
            prompt=record.prompt,
            affiliate_link=record.affiliate_link,
            platform=record.platform,
            product_image_url=record.product_image_url or None,
            content=record.content,
        )
        self._refresh_amazon_html()

    # ------------------------------------------------------------------
    # Banner ideas
    # ------------------------------------------------------------------

    async def generate_ideas(self, prompt: str) -> BannerIdeasState:
        self.ideas.prompt = prompt
        if not prompt.strip():
            self._reject("Please enter a prompt for banner ideas.")

        self.ideas.generating = True
        try:
            ideas = await self.agents.banner_ideas(BannerIdeasInput(prompt=prompt))
        except (AgentError, ApplicationError) as e:
            raise self._generation_failed("Failed to generate banner ideas.", e) from e
        finally:
            self.ideas.generating = False

        self.ideas.ideas = list(ideas)
        self.notifications.push("Success", "Banner ideas generated!")
        return self.ideas

    def get_idea(self, index: int) -> BannerIdea:
        if index < 0 or index >= len(self.ideas.ideas):
            raise ApplicationError(code=ErrorCode.NOT_FOUND, message=f"No banner idea at index {index}")
        return self.ideas.ideas[index]

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    async def _share(self, record, param: str) -> ShareResponse:
        user_id = self.session.require_user("share content")
        try:
            doc_id = await self.persistence.share_content(user_id, record)
        except ApplicationError as e:
            self.notifications.error("Error Sharing Content", e.message)
            raise
        url = self.location.share_url(param, doc_id, base_url=self.share_base_url)
        logger.info(f"[ContentPanel] Generated shareable link: {url}")
        self.notifications.push("Content Ready to Share!", "Link generated for sharing.")
        return ShareResponse(id=doc_id, url=url)
