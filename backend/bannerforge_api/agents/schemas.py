"""Input/output schemas of the content agents"""

from typing import List, Optional
from pydantic import BaseModel, Field

from bannerforge_api.models.schemas import BannerIdea, Platform


class GeneralContentInput(BaseModel):
    prompt: str
    platform: Platform
    external_link: Optional[str] = None


class GeneralContentOutput(BaseModel):
    content: str


class AmazonContentInput(BaseModel):
    prompt: str
    affiliate_link: str
    platform: Platform


class AmazonContentOutput(BaseModel):
    content: str


class BannerIdeasInput(BaseModel):
    prompt: str


class BannerIdeasOutput(BaseModel):
    ideas: List[BannerIdea] = Field(default_factory=list)


CONTENT_RESPONSE_SCHEMA = {
    "title": "ContentResponse",
    "type": "object",
    "properties": {
        "content": {
            "type": "string",
            "description": "The generated content."
        }
    },
    "required": ["content"],
    "additionalProperties": False
}

# Strict structured output needs an object at the root, so the idea list is wrapped
BANNER_IDEAS_RESPONSE_SCHEMA = {
    "title": "BannerIdeasResponse",
    "type": "object",
    "properties": {
        "ideas": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "ideaName": {
                        "type": "string",
                        "description": "A short name for the banner idea."
                    },
                    "descriptionSuggestion": {
                        "type": "string",
                        "description": "A brief, catchy description for the banner (max 20 words)."
                    },
                    "ctaSuggestion": {
                        "type": "string",
                        "description": "Text for the call-to-action button (max 5 words)."
                    },
                    "visualConcept": {
                        "type": "string",
                        "description": "A visual concept for the banner image (max 15 words)."
                    }
                },
                "required": ["ideaName", "descriptionSuggestion", "ctaSuggestion", "visualConcept"],
                "additionalProperties": False
            }
        }
    },
    "required": ["ideas"],
    "additionalProperties": False
}
