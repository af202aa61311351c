from typing import Dict, List, Optional

from pydantic import BaseModel, Field

DEFAULT_SECTIONS = [
    "Exposure",
    "Retinex",
    "Local Contrast",
    "Wavlet",
    "Vibrance",
    "White Balance",
    "Color appearance",
    "Shadows & Highlights",
    "RGB Curves",
    "ColorToning",
    "ToneEqualizer",
    "Sharpening",
    "Defringing",
    "Dehaze",
    "Directional Pyramid Denoising",
]


class ProfileEditError(ValueError):
    """Base class for errors surfaced by profile editing."""


class InvalidEditBlockError(ProfileEditError):
    pass


class MissingSectionError(ProfileEditError):
    """A section listed in the original order has no text to reconstruct from."""


class NoEditsFoundError(ProfileEditError):
    """The AI response contained no parseable edits in either format."""


class NoMatchingSectionsError(ProfileEditError):
    """Edits were parsed, but none of them targets a section of the profile."""


class EditBlock(BaseModel):
    """
    A single SEARCH/REPLACE pair suggested by the LLM.
    The search side may list only the parameters that change within a section.
    """

    search: str = Field(..., description="Text to locate, usually a [Section] header plus the old parameter lines.")
    replace: str = Field(..., description="Replacement text, with the same parameter lines in the same order.")


class SectionChange(BaseModel):
    """
    Final parameter assignments for one section, with no 'before' text.
    """

    section_name: str = Field(..., description="Section name without brackets, e.g. 'Exposure'.")
    parameters: Dict[str, str] = Field(
        default_factory=dict,
        description="Parameter name -> full 'Name=value' line. Insertion order follows the response.",
    )


class SplitResult(BaseModel):
    sections: List[str] = Field(default_factory=list)
    order: List[str] = Field(default_factory=list)


class ClassifiedSections(SplitResult):
    included: List[str] = Field(default_factory=list)
    excluded: List[str] = Field(default_factory=list)

    @property
    def included_text(self) -> str:
        return "\n".join(self.included)


class GenerationSettings(BaseModel):
    sections: List[str] = Field(default_factory=lambda: list(DEFAULT_SECTIONS))
    preset: str = Field("aggressive", description="One of aggressive, creative, balanced, technical.")
    prompt: Optional[str] = Field(None, description="Custom prompt text. Overrides the preset when set.")
    generations: int = Field(1, ge=1)


class GenerationResult(BaseModel):
    generation_index: int
    success: bool
    pp3_content: str = ""
    error: Optional[str] = None
