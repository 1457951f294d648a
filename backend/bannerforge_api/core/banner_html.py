"""Embeddable banner HTML"""

import math
from typing import Optional

from bannerforge_api.models.schemas import BannerConfig
from bannerforge_api.utils.sanitization import escape_html, safe_css_color, safe_url


CONTENT_PADDING = 18
IMAGE_RATIO = 0.6

# Keyframes shipped with the fragment so the animation works on any host page
BORDER_KEYFRAMES = {
    "pulse": (
        "@keyframes pulse-border { 0% { box-shadow: 0 0 0 0 rgba(255,255,255,0.6); } "
        "70% { box-shadow: 0 0 0 10px rgba(255,255,255,0); } "
        "100% { box-shadow: 0 0 0 0 rgba(255,255,255,0); } }"
    ),
    "glow": (
        "@keyframes glow-border { from { box-shadow: 0 0 5px var(--accent-color-var), 0 0 10px var(--accent-color-var); } "
        "to { box-shadow: 0 0 20px var(--accent-color-var), 0 0 30px var(--accent-color-var); } }"
    ),
}


def image_height(height: int) -> int:
    """Height of the image panel: 60% of the banner, rounded half up"""
    return int(math.floor(height * IMAGE_RATIO + 0.5))


def placeholder_image_url(width: int, height: int) -> str:
    return f"https://placehold.co/{width}x{height}.png"


def _color(config: BannerConfig, field: str) -> str:
    """Configured colour, or the field default when it is not a plain CSS colour"""
    return safe_css_color(getattr(config, field), BannerConfig.model_fields[field].default)


def border_animation_css(config: BannerConfig) -> str:
    """Resolve the border animation to inline declarations"""
    if config.border_animation == "pulse":
        return "animation: pulse-border 1.5s infinite;"
    if config.border_animation == "glow":
        accent = _color(config, "accent_color")
        return f"animation: glow-border 3s infinite alternate; --accent-color-var: {accent};"
    return ""


def build_embed_html(config: BannerConfig, image_failed: bool = False) -> str:
    """
    Render the banner as a self-contained HTML fragment with inline styles.

    Pure function: the same config always yields the same string. Every
    user-supplied value is escaped; non-http(s) URLs are replaced (links by
    "#", images by a placeholder).

    Args:
        config: Banner configuration
        image_failed: True once the client reported the image URL as broken

    Returns:
        HTML fragment
    """
    width = config.width
    height = config.height
    img_height = image_height(height)
    placeholder = placeholder_image_url(width, img_height)

    bg = _color(config, "background_color")
    accent = _color(config, "accent_color")
    text_color = _color(config, "text_color")
    button_font = max(12, config.font_size - 2)

    image_src = placeholder if image_failed else safe_url(config.image_url, fallback=placeholder)
    link = safe_url(config.destination_link)
    description = escape_html(config.description)
    button_text = escape_html(config.button_text)

    keyframes = BORDER_KEYFRAMES.get(config.border_animation)
    style_block = f"<style>{keyframes}</style>\n" if keyframes else ""

    return f"""{style_block}<div style="width: {width}px; height: {height}px; background: linear-gradient(135deg, {bg} 0%, {accent}22 100%); color: {text_color}; border-radius: 12px; overflow: hidden; position: relative; display: flex; flex-direction: column; font-family: Arial, sans-serif; box-shadow: 0 10px 25px rgba(0,0,0,0.15); transition: all 0.3s ease; cursor: pointer; {border_animation_css(config)}" onmouseover="this.style.transform='translateY(-5px)'; this.style.boxShadow='0 15px 35px rgba(0,0,0,0.2)'" onmouseout="this.style.transform='translateY(0)'; this.style.boxShadow='0 10px 25px rgba(0,0,0,0.15)'">
  <div style="height: {img_height}px; overflow: hidden; position: relative;">
    <img src="{image_src}" alt="Banner Image" style="width: 100%; height: 100%; object-fit: cover; transition: transform 0.3s ease;" onerror="this.onerror=null; this.src='{placeholder}'" onmouseover="this.style.transform='scale(1.05)'" onmouseout="this.style.transform='scale(1)'" />
    <div style="position: absolute; top: 0; left: 0; right: 0; bottom: 0; background: linear-gradient(to bottom, transparent 0%, rgba(0,0,0,0.3) 100%);"></div>
  </div>
  <div style="padding: {CONTENT_PADDING}px; font-size: {config.font_size}px; flex: 1; display: flex; flex-direction: column; position: relative;">
    <div style="flex: 1; overflow: hidden; line-height: 1.4; font-weight: 500; margin-bottom: 12px;">
      {description}
    </div>
    <a href="{link}" target="_blank" rel="noopener noreferrer" style="display: inline-block; text-align: center; padding: 10px 18px; background: linear-gradient(45deg, {accent}, {accent}dd); border-radius: 25px; text-decoration: none; color: white; font-size: {button_font}px; font-weight: 600; transition: all 0.3s ease; border: none; box-shadow: 0 4px 15px {accent}40;">
      {button_text}
    </a>
  </div>
</div>"""


def preview_summary(config: BannerConfig, image_failed: Optional[bool] = False) -> dict:
    """Dimensions the preview panel needs besides the HTML itself"""
    img_height = image_height(config.height)
    return {
        "width": config.width,
        "height": config.height,
        "imageHeight": img_height,
        "imageUrl": placeholder_image_url(config.width, img_height) if image_failed else config.image_url,
        "animation": config.border_animation,
    }
