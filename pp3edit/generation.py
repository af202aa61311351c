"""
Drives one profile generation: classify sections, prompt the model with the
preview image, and merge whichever edit format the response uses back into
the base profile.

The model itself is a caller-supplied callable:

    complete(prompt_text: str, image: bytes) -> str

Picking the best of several generations uses a second, optional callable that
sees one rendered image per successful generation:

    evaluate(prompt_text: str, images: List[bytes]) -> str
"""

import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import structlog

from pp3edit.models import (
    EditBlock,
    GenerationResult,
    GenerationSettings,
    NoEditsFoundError,
    NoMatchingSectionsError,
    ProfileEditError,
    SectionChange,
)
from pp3edit.parser import parse_direct_section_changes, parse_search_replace_blocks
from pp3edit.patch import apply_edit_blocks, find_section_bounds
from pp3edit.prompts import build_evaluation_prompt, build_generation_prompt
from pp3edit.reconstruct import apply_direct_section_changes, reconstruct_profile
from pp3edit.sections import classify_sections, split_sections

logger = structlog.get_logger(__name__)

CompletionFn = Callable[[str, bytes], str]
EvaluationFn = Callable[[str, List[bytes]], str]

BEST_GENERATION_PATTERN = re.compile(r"BEST_GENERATION:\s*(\d+)", re.IGNORECASE)


def _block_targets(content: str, block: EditBlock) -> bool:
    lines = content.split("\n")
    header = next((line.strip() for line in block.search.split("\n") if line.strip().startswith("[")), None)
    if header is not None and find_section_bounds(lines, header) is not None:
        return True
    return block.search.strip() in content


def _apply_direct_changes(base_content: str, changes: List[SectionChange]) -> str:
    known = set(split_sections(base_content).order)
    if not any(change.section_name in known for change in changes):
        names = ", ".join(f"[{change.section_name}]" for change in changes)
        raise NoMatchingSectionsError(f"None of the changed sections exist in the profile: {names}")
    return apply_direct_section_changes(base_content, changes)


def _apply_search_replace(base_content: str, blocks: List[EditBlock], sections: Iterable[str]) -> str:
    classified = classify_sections(base_content, sections)
    to_be_edited = classified.included_text

    if not any(_block_targets(to_be_edited, block) for block in blocks):
        raise NoMatchingSectionsError(
            f"Found {len(blocks)} search/replace blocks but none matches an editable section"
        )

    edited = apply_edit_blocks(to_be_edited, blocks)
    edited_sections = split_sections(edited).sections

    return reconstruct_profile(classified.order, edited_sections, classified.included, classified.excluded)


def apply_ai_response(base_content: str, response_text: str, sections: Iterable[str]) -> str:
    """
    Merges an AI response into the base profile.

    Direct section changes are tried first. When there are none, fences are
    stripped and SEARCH/REPLACE blocks are applied to the editable sections.

    Raises:
        NoEditsFoundError: the response holds no edits in either format.
        NoMatchingSectionsError: edits were found but target no known section.
    """
    sections = list(sections)

    changes = parse_direct_section_changes(response_text)
    if changes:
        logger.info(f"Found {len(changes)} direct section changes")
        return _apply_direct_changes(base_content, changes)

    logger.info("No direct section changes found, trying search/replace blocks")
    blocks = parse_search_replace_blocks(response_text.replace("```", ""))
    if not blocks:
        raise NoEditsFoundError("No valid changes found in AI response")

    logger.info(f"Found {len(blocks)} search/replace blocks")
    return _apply_search_replace(base_content, blocks, sections)


def generate_profile(
    base_content: str,
    image: bytes,
    complete: CompletionFn,
    settings: Optional[GenerationSettings] = None,
    extra_context: Optional[str] = None,
) -> str:
    """
    Runs one generation and returns the merged profile text.
    Errors raised by `complete` propagate unchanged.
    """
    settings = settings or GenerationSettings()

    classified = classify_sections(base_content, settings.sections)
    prompt_text = build_generation_prompt(
        classified.included_text,
        preset=settings.preset,
        prompt=settings.prompt,
        extra_context=extra_context,
    )

    logger.info("Sending request to AI model", sections=len(classified.included))
    response_text = complete(prompt_text, image)
    if not response_text:
        raise ProfileEditError("AI response was empty")

    logger.debug("AI response received", response=response_text)
    return apply_ai_response(base_content, response_text, settings.sections)


def generate_profiles(
    base_content: str,
    image: bytes,
    complete: CompletionFn,
    settings: Optional[GenerationSettings] = None,
    extra_context: Optional[str] = None,
) -> List[GenerationResult]:
    """
    Runs settings.generations independent generations.
    A failed generation is recorded rather than raised; if all fail, raises
    ProfileEditError.
    """
    settings = settings or GenerationSettings()
    results: List[GenerationResult] = []

    for index in range(settings.generations):
        logger.info(f"Generating PP3 profile {index + 1}/{settings.generations}")
        try:
            content = generate_profile(base_content, image, complete, settings, extra_context)
            results.append(GenerationResult(generation_index=index, success=True, pp3_content=content))
        except Exception as e:
            logger.warning(f"Failed to generate PP3 profile {index + 1}: {e}")
            results.append(GenerationResult(generation_index=index, success=False, error=str(e)))

    if not any(result.success for result in results):
        raise ProfileEditError("Failed to generate any successful PP3 profiles")

    return results


def parse_best_generation_index(response_text: str) -> int:
    """
    Reads 'BEST_GENERATION: N' from an evaluation response.
    N is 1-based; the returned index is 0-based. A missing marker means the first.
    """
    match = BEST_GENERATION_PATTERN.search(response_text)
    number = int(match.group(1)) if match else 1
    return max(0, number - 1)


def select_best_generation(
    results: Sequence[GenerationResult],
    evaluate: Optional[EvaluationFn] = None,
    images: Optional[Sequence[Optional[bytes]]] = None,
) -> Tuple[GenerationResult, str]:
    """
    Picks the winning generation among the successful ones.

    Args:
        results: Output of generate_profiles.
        evaluate: Optional model call that compares the rendered candidates.
        images: Rendered preview per entry of results (same order). A successful
                generation without an image is left out of the comparison.

    Returns:
        (winning result, reason). The reason is the evaluator's full response,
        or a note explaining why no evaluation took place.

    Raises:
        ProfileEditError: no generation succeeded.
    """
    candidates = [r for r in results if r.success]
    if not candidates:
        raise ProfileEditError("No successful generations to evaluate")

    if len(candidates) == 1:
        return candidates[0], "Only one successful generation available"

    if evaluate is None:
        return candidates[0], "No evaluator given. Using first successful generation."

    candidate_images: List[bytes] = []
    if images is not None:
        rendered = []
        for result, image in zip(results, images):
            if not result.success:
                continue
            if not image:
                logger.warning(f"No rendered image for generation {result.generation_index + 1}, skipping it")
                continue
            rendered.append(result)
            candidate_images.append(image)
        candidates = rendered or candidates

    try:
        response_text = evaluate(build_evaluation_prompt(len(candidates)), candidate_images)
    except Exception as e:
        logger.warning(f"AI evaluation failed: {e}")
        return candidates[0], f"AI evaluation failed: {e}. Using first successful generation as fallback."

    index = min(parse_best_generation_index(response_text or ""), len(candidates) - 1)
    winner = candidates[index]
    logger.info(f"AI selected generation {winner.generation_index + 1} as the best")
    logger.debug("AI evaluation response", response=response_text)
    return winner, response_text
