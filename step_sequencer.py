"""
Thumbnail Wizard - Step Sequencer
=================================
Enforces the legal step order of the creation flow:

    UPLOAD_FACE(1) -> VIDEO_INFO(2) -> SELECT_STYLE(3) -> REVIEW(4) -> DONE(5)

Moves are always by exactly one step. Forward moves are gated by the
predicate of the step being left; backward moves are never validated.
"""

from enum import IntEnum
from typing import Optional

from config import TOTAL_STEPS
from exceptions import ValidationError
from wizard_state import WizardStore
from utils import setup_logger

logger = setup_logger(__name__)


class Step(IntEnum):
    UPLOAD_FACE = 1
    VIDEO_INFO = 2
    SELECT_STYLE = 3
    REVIEW = 4
    DONE = 5


STEP_TITLES = {
    Step.UPLOAD_FACE: "wizard.steps.upload_face",
    Step.VIDEO_INFO: "wizard.steps.video_info",
    Step.SELECT_STYLE: "wizard.steps.select_style",
    Step.REVIEW: "wizard.steps.review",
    Step.DONE: "wizard.steps.done",
}

NO_STYLE_WARNING = "no style selected, default styling applies"


class StepSequencer:
    """Moves a WizardStore through the steps."""

    def __init__(self, store: WizardStore):
        self.store = store

    @property
    def step(self) -> Step:
        return Step(self.store.current_step)

    def advance(self) -> list[str]:
        """
        Move forward one step if the current step's gate holds.

        Returns:
            Non-blocking warnings produced while leaving the step

        Raises:
            ValidationError: the gate does not hold (step is left unchanged)
        """
        session = self.store.session
        step = self.step
        warnings = []

        if step == Step.DONE:
            return warnings

        if step == Step.UPLOAD_FACE and not session.face_image_ref:
            raise ValidationError(
                "face image required",
                message_key="wizard.errors.face_required",
                field="face_image_ref",
            )

        if step == Step.VIDEO_INFO and not session.video_title.strip():
            raise ValidationError(
                "title required",
                message_key="wizard.errors.title_required",
                field="video_title",
            )

        if step == Step.SELECT_STYLE and not session.selected_style_id:
            warnings.append(NO_STYLE_WARNING)

        # Leaving the review step is driven by a finished generation
        if step == Step.REVIEW and not session.generated_thumbnail_ref:
            raise ValidationError(
                "thumbnail not generated",
                message_key="wizard.errors.not_generated",
                field="generated_thumbnail_ref",
            )

        self.store.go_to_step(step + 1)
        logger.debug(f"Session {session.id}: step {step} -> {step + 1}")
        return warnings

    def retreat(self) -> None:
        """Move back one step. No-op on the first step."""
        if self.store.current_step > 1:
            self.store.go_to_step(self.store.current_step - 1)

    def can_generate(self) -> bool:
        """Generation (and regeneration) is allowed from review or done."""
        return self.step in (Step.REVIEW, Step.DONE)

    def complete_generation(self, result_url: str, description: Optional[str] = None) -> None:
        """
        Store a successful generation result and enter the terminal step.

        Raises:
            ValidationError: the flow is not at the review or done step
        """
        if not self.can_generate():
            raise ValidationError(
                "generation is only available from the review step",
                message_key="wizard.errors.not_on_review",
            )

        self.store.set_field("generated_thumbnail_ref", result_url)
        self.store.set_field("generated_description", description)
        self.store.go_to_step(Step.DONE)

    def ensure_terminal_state(self) -> bool:
        """
        Guard the terminal step against incomplete state.

        Returns:
            True if the flow was sent back to the review step
        """
        if self.step == Step.DONE and not self.store.session.generated_thumbnail_ref:
            self.store.go_to_step(Step.REVIEW)
            logger.warning(f"Session {self.store.session.id} reached the last step without a result, back to review")
            return True
        return False

    def describe(self) -> dict:
        """Step metadata for the views."""
        return {
            "current_step": int(self.step),
            "total_steps": TOTAL_STEPS,
            "step_name": self.step.name.lower(),
            "title_key": STEP_TITLES[self.step],
            "can_retreat": self.store.current_step > 1,
            "can_generate": self.can_generate(),
        }
