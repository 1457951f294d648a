"""Domain records and API request/response schemas

Wire format is camelCase (the field names stored in the document database);
Python code uses snake_case attributes.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


Platform = Literal["blog", "facebook", "x", "telegram"]
BorderAnimation = Literal["none", "pulse", "glow"]

# Ranges the editor enforces on its inputs; the model itself accepts any integer.
FIELD_RANGES = {
    "font_size": (10, 24),
    "width": (100, 1000),
    "height": (100, 1000),
}


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, **kwargs) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, **kwargs)


# ============================================================================
# Domain records
# ============================================================================

class BannerConfig(CamelModel):
    """Full set of visual and textual parameters of one banner"""
    image_url: str = "https://placehold.co/300x150.png"
    description: str = "Discover the future of digital design"
    destination_link: str = "https://example.com"
    background_color: str = "#1a1a2e"
    text_color: str = "#ffffff"
    accent_color: str = "#ff6b6b"
    font_size: int = 14
    width: int = 300
    height: int = 300
    button_text: str = "Discover more →"
    border_animation: BorderAnimation = "none"


class SavedBanner(BannerConfig):
    """A BannerConfig persisted under its owner's banner collection"""
    id: str
    created_at: Optional[str] = None


class Session(CamelModel):
    """Identity currently recognized by the workspace"""
    user_id: Optional[str] = None
    email: Optional[str] = None
    is_anonymous: bool = False


class SocialLinks(CamelModel):
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    website: Optional[str] = None


class SharedAiContent(CamelModel):
    """Publicly readable snapshot of generated general content"""
    prompt: str = ""
    content: str = ""
    image_url: str = ""
    platform: Platform = "blog"
    external_link: Optional[str] = None
    html_output: Optional[str] = None
    shared_by: Optional[str] = None
    shared_at: Optional[Any] = None


class SharedAmazonContent(CamelModel):
    """Publicly readable snapshot of generated Amazon affiliate content"""
    prompt: str = ""
    content: str = ""
    product_image_url: str = ""
    affiliate_link: str = ""
    platform: Platform = "blog"
    html_output: Optional[str] = None
    shared_by: Optional[str] = None
    shared_at: Optional[Any] = None


class BannerIdea(CamelModel):
    """One brainstormed banner idea returned by the generation API"""
    idea_name: str
    description_suggestion: str
    cta_suggestion: str
    visual_concept: str


class Notification(BaseModel):
    """Toast-style user notification"""
    ts: str
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


# ============================================================================
# Requests
# ============================================================================

class MountRequest(CamelModel):
    """POST /api/workspace request"""
    page_url: str = Field(default="http://localhost:3000/", description="URL of the page mounting the workspace")


class CredentialsRequest(BaseModel):
    """POST /api/auth/signin and /api/auth/signup request"""
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class FieldUpdateRequest(BaseModel):
    """PATCH /api/banner request"""
    name: str
    value: Any


class GeneralContentRequest(CamelModel):
    prompt: str
    platform: Platform = "blog"
    external_link: Optional[str] = None
    image_url: Optional[str] = None


class AmazonContentRequest(CamelModel):
    prompt: str
    affiliate_link: str = ""
    platform: Platform = "blog"
    product_image_url: Optional[str] = None


class BannerIdeasRequest(CamelModel):
    prompt: str


# ============================================================================
# Responses
# ============================================================================

class ShareResponse(CamelModel):
    id: str
    url: str


class ErrorResponse(BaseModel):
    """Error response"""
    error_id: str
    code: str
    message: str
    hint: Optional[str] = None
    retryable: bool = False
    workspace_id: Optional[str] = None
    notifications: List[Notification] = []
