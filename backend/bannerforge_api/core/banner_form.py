"""Banner editor state of one workspace"""

from typing import Any, Optional
import logging

from pydantic import ValidationError

from bannerforge_api.core.banner_html import build_embed_html, preview_summary
from bannerforge_api.models.errors import ApplicationError, ErrorCode
from bannerforge_api.models.schemas import BannerConfig, BannerIdea, SavedBanner
from bannerforge_api.utils.sanitization import escape_html

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = {"font_size", "width", "height"}

# camelCase wire names -> attribute names
FIELD_ALIASES = {
    field.alias or name: name
    for name, field in BannerConfig.model_fields.items()
}


def _field_name(name: str) -> str:
    if name in BannerConfig.model_fields:
        return name
    if name in FIELD_ALIASES:
        return FIELD_ALIASES[name]
    raise ApplicationError(
        code=ErrorCode.VALIDATION_ERROR,
        message=f"Unknown banner field: {escape_html(name)}",
    )


def _parse_number(name: str, value: Any) -> int:
    """Numeric inputs arrive as text; parse as integer, falling back to decimal"""
    if isinstance(value, bool):
        raise ApplicationError(code=ErrorCode.VALIDATION_ERROR, message=f"{name} must be a number")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        pass
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        raise ApplicationError(
            code=ErrorCode.VALIDATION_ERROR,
            message=f"{name} must be a number",
        )


class BannerFormState:
    """
    Current BannerConfig plus preview flags.

    The preview is a snapshot: editing after ``generate_preview`` keeps the
    preview visible and it simply reflects the current config.
    """

    def __init__(self, config: Optional[BannerConfig] = None):
        self.config = config or BannerConfig()
        self.preview_visible = False
        self.image_failed = False

    def update_field(self, name: str, value: Any) -> BannerConfig:
        """Replace one field; numeric fields are parsed from text"""
        attr = _field_name(name)
        if attr in NUMERIC_FIELDS:
            value = _parse_number(attr, value)

        try:
            updated = BannerConfig.model_validate({**self.config.model_dump(), attr: value})
        except ValidationError as e:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Invalid value for {attr}",
                hint=e.errors()[0].get("msg") if e.errors() else None,
            ) from e

        if attr == "image_url" and updated.image_url != self.config.image_url:
            self.image_failed = False
        self.config = updated
        return self.config

    def generate_preview(self) -> bool:
        self.preview_visible = True
        return self.preview_visible

    def mark_image_failed(self):
        logger.info(f"[BannerForm] Image failed to load: {self.config.image_url}")
        self.image_failed = True

    def embed_html(self) -> str:
        return build_embed_html(self.config, image_failed=self.image_failed)

    def preview(self) -> dict:
        return {
            "visible": self.preview_visible,
            "html": self.embed_html() if self.preview_visible else None,
            **preview_summary(self.config, self.image_failed),
        }

    def apply_idea(self, idea: BannerIdea) -> BannerConfig:
        """Copy an idea's description and CTA into the banner; other fields stay"""
        self.config = self.config.model_copy(update={
            "description": idea.description_suggestion,
            "button_text": idea.cta_suggestion,
        })
        self.preview_visible = True
        return self.config

    def load_banner(self, saved: SavedBanner) -> BannerConfig:
        """Replace the config with a saved banner's parameters"""
        self.config = BannerConfig.model_validate(saved.model_dump(exclude={"id", "created_at"}))
        self.image_failed = False
        self.preview_visible = True
        return self.config
