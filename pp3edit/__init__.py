from importlib.metadata import PackageNotFoundError, version

from pp3edit.generation import (
    apply_ai_response,
    generate_profile,
    generate_profiles,
    parse_best_generation_index,
    select_best_generation,
)
from pp3edit.models import EditBlock, GenerationSettings, SectionChange
from pp3edit.parser import parse_direct_section_changes, parse_search_replace_blocks
from pp3edit.patch import apply_edit_blocks, apply_fuzzy_search_replace
from pp3edit.reconstruct import apply_direct_section_changes, reconstruct_profile
from pp3edit.sections import classify_sections, split_sections

try:
    __version__ = version("pp3edit")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "split_sections",
    "classify_sections",
    "parse_search_replace_blocks",
    "parse_direct_section_changes",
    "apply_edit_blocks",
    "apply_fuzzy_search_replace",
    "apply_direct_section_changes",
    "reconstruct_profile",
    "apply_ai_response",
    "generate_profile",
    "generate_profiles",
    "parse_best_generation_index",
    "select_best_generation",
    "EditBlock",
    "SectionChange",
    "GenerationSettings",
    "__version__",
]
