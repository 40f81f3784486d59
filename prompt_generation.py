"""
Thumbnail Wizard - Prompt Generation Module
===========================================
Builds the natural-language prompt sent to the vision model from the wizard
fields. Field order is fixed: title, description, details, text, style.
Empty optional fields are left out of the prompt.
"""

from dataclasses import dataclass
from typing import Optional

from exceptions import ValidationError
from utils import setup_logger

logger = setup_logger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class GenerationRequest:
    """Wizard fields handed to the generation proxy."""
    face_image: str                                # Public URL or data URI
    video_title: str
    video_description: Optional[str] = None        # Description / keywords
    thumbnail_details: Optional[str] = None        # Free-form visual details
    thumbnail_text: Optional[str] = None           # Text to display in the thumbnail
    style: Optional[str] = None                    # Style name

    def validate(self) -> None:
        """
        Raises:
            ValidationError: face image or title missing
        """
        if not (self.face_image or "").strip():
            raise ValidationError(
                "face image required",
                message_key="wizard.errors.face_required",
                field="face_image",
            )
        if not (self.video_title or "").strip():
            raise ValidationError(
                "title required",
                message_key="wizard.errors.title_required",
                field="video_title",
            )


# =============================================================================
# PROMPT TEMPLATE
# =============================================================================

PROMPT_HEADER = "Create a professional YouTube thumbnail with the following elements:"

# (label, request attribute) in prompt order
PROMPT_FIELDS = (
    ("Title", "video_title"),
    ("Description/Keywords", "video_description"),
    ("Details", "thumbnail_details"),
    ("Text to display", "thumbnail_text"),
    ("Style", "style"),
)

MR_BEAST_STYLE = """This should specifically follow Mr. Beast's thumbnail style:
- Bold, eye-catching large text (usually in yellow, red, or white)
- Bright, high-contrast colors
- Shocked facial expressions or reactions
- Money visuals when relevant (cash, dollar signs)
- Clean, easily readable composition
- Often includes arrows pointing at important elements
- Numbers or dollar amounts should be very large and prominent
- Use vibrant backgrounds that make the subject pop"""

PROMPT_FOOTER = (
    "The thumbnail should be eye-catching, professional, and optimized for YouTube.\n"
    "Please describe in detail how this thumbnail should look based on the face "
    "in the image and the provided details."
)


def is_mr_beast_style(request: GenerationRequest) -> bool:
    """Money amounts, challenges or an explicit mention switch to the Mr. Beast look."""
    return (
        "$" in (request.video_title or "")
        or "Mr. Beast" in (request.thumbnail_details or "")
        or "$" in (request.thumbnail_text or "")
        or "challenge" in (request.video_description or "")
    )


def build_thumbnail_prompt(request: GenerationRequest) -> str:
    """
    Compose the prompt for one generation request.

    Args:
        request: Validated GenerationRequest

    Returns:
        Prompt text
    """
    lines = [PROMPT_HEADER]
    for label, attribute in PROMPT_FIELDS:
        value = (getattr(request, attribute) or "").strip()
        if value:
            lines.append(f"- {label}: {value}")

    sections = ["\n".join(lines)]

    if is_mr_beast_style(request):
        logger.info("Using Mr. Beast thumbnail style")
        sections.append(MR_BEAST_STYLE)

    sections.append(PROMPT_FOOTER)
    return "\n\n".join(sections)


def build_image_prompt(request: GenerationRequest, description: str) -> str:
    """
    Prompt for rendering the thumbnail image from the face reference.

    Uses the vision model's description as the scene.
    """
    return f"""Professional YouTube video thumbnail, 16:9.
Keep the exact same person from the reference image: same face, hair and skin tone.

SCENE:
{description.strip()}

Style: Bold, eye-catching YouTube thumbnail with high contrast colors.
Photorealistic style, professional quality.
"""
