"""
Unit Tests for Prompt Generation

Tests for prompt_generation: request validation and prompt composition.
"""

import pytest

from exceptions import ValidationError
from prompt_generation import (
    GenerationRequest,
    PROMPT_HEADER,
    PROMPT_FOOTER,
    MR_BEAST_STYLE,
    build_thumbnail_prompt,
    build_image_prompt,
    is_mr_beast_style,
)

FACE = "https://cdn.test/me.jpg"


class TestValidate:
    """Tests for GenerationRequest.validate"""

    def test_missing_face_image(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerationRequest(face_image="", video_title="Title").validate()

        assert exc_info.value.field == "face_image"

    def test_blank_title(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerationRequest(face_image=FACE, video_title="   ").validate()

        assert exc_info.value.field == "video_title"

    def test_minimal_request_is_valid(self):
        GenerationRequest(face_image=FACE, video_title="Title").validate()


class TestBuildThumbnailPrompt:
    """Tests for build_thumbnail_prompt"""

    def test_title_only_omits_optional_lines(self):
        prompt = build_thumbnail_prompt(GenerationRequest(face_image=FACE, video_title="Cooking Pasta"))

        assert prompt.startswith(PROMPT_HEADER)
        assert "- Title: Cooking Pasta" in prompt
        assert "Description/Keywords" not in prompt
        assert "Details" not in prompt
        assert "Text to display" not in prompt
        assert "- Style" not in prompt
        assert prompt.endswith(PROMPT_FOOTER)

    def test_fields_follow_fixed_order(self):
        request = GenerationRequest(
            face_image=FACE,
            video_title="Title",
            video_description="keywords",
            thumbnail_details="details",
            thumbnail_text="TEXT",
            style="Neon Glow",
        )

        prompt = build_thumbnail_prompt(request)

        positions = [
            prompt.index("- Title: Title"),
            prompt.index("- Description/Keywords: keywords"),
            prompt.index("- Details: details"),
            prompt.index("- Text to display: TEXT"),
            prompt.index("- Style: Neon Glow"),
        ]
        assert positions == sorted(positions)

    def test_blank_optional_field_is_omitted(self):
        request = GenerationRequest(face_image=FACE, video_title="Title", thumbnail_text="   ")

        assert "Text to display" not in build_thumbnail_prompt(request)

    def test_mr_beast_block_added_for_money_title(self):
        request = GenerationRequest(face_image=FACE, video_title="I Gave Away $1,000,000")

        assert MR_BEAST_STYLE in build_thumbnail_prompt(request)

    def test_no_mr_beast_block_for_plain_request(self):
        request = GenerationRequest(face_image=FACE, video_title="Morning Routine")

        assert MR_BEAST_STYLE not in build_thumbnail_prompt(request)


class TestMrBeastDetection:

    @pytest.mark.parametrize("fields", [
        {"video_title": "Win $500"},
        {"video_title": "t", "thumbnail_text": "$$$"},
        {"video_title": "t", "thumbnail_details": "like Mr. Beast does"},
        {"video_title": "t", "video_description": "24 hour challenge"},
    ])
    def test_triggers(self, fields):
        assert is_mr_beast_style(GenerationRequest(face_image=FACE, **fields))

    def test_plain_request(self):
        assert not is_mr_beast_style(GenerationRequest(face_image=FACE, video_title="Vlog"))


class TestBuildImagePrompt:

    def test_embeds_description(self):
        prompt = build_image_prompt(
            GenerationRequest(face_image=FACE, video_title="Title"),
            "  Red background, big arrow.  "
        )

        assert "Red background, big arrow." in prompt
        assert "same person" in prompt
