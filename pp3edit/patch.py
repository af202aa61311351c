"""
Applies search/replace edit blocks to profile text.

The fuzzy matcher targets a section by its header and rewrites only the
parameters named in the block, so the search side may skip unchanged lines.
When a block cannot be matched that way, the whole search text is replaced
literally.
"""

import re
from typing import Dict, List, Optional, Tuple

import structlog

from pp3edit.models import EditBlock, InvalidEditBlockError

logger = structlog.get_logger(__name__)

_INDENT_PATTERN = re.compile(r"^\s*")


def apply_literal_replacement(document: str, search: str, replace: str) -> str:
    """Replaces the first occurrence of the trimmed search text. No-op when absent."""
    target = search.strip()
    if not target or target not in document:
        return document
    return document.replace(target, replace.strip(), 1)


def find_section_bounds(lines: List[str], header: str) -> Optional[Tuple[int, int]]:
    """
    Locates a section in a list of lines.
    Returns (header_index, end_index) where end_index is the next well-formed
    header or len(lines). None when the header is absent.
    """
    start = next((i for i, line in enumerate(lines) if line.strip() == header), None)
    if start is None:
        return None

    end = len(lines)
    for i in range(start + 1, len(lines)):
        line = lines[i].strip()
        if line.startswith("[") and line.endswith("]"):
            end = i
            break

    return start, end


def extract_parameter_lines(lines: List[str]) -> List[str]:
    """Trimmed non-empty lines that are not section headers."""
    return [line.strip() for line in lines if line.strip() and not line.strip().startswith("[")]


def _build_replacement_map(search_params: List[str], replace_params: List[str]) -> Dict[str, str]:
    # Paired by position, keyed by the search side's parameter name.
    return {search.split("=", 1)[0]: replacement for search, replacement in zip(search_params, replace_params)}


def _apply_replacements_in_section(
    lines: List[str], bounds: Tuple[int, int], replacements: Dict[str, str]
) -> List[str]:
    result = list(lines)
    start, end = bounds

    for i in range(start + 1, end):
        line = result[i].strip()
        if not line:
            continue

        key = line.split("=", 1)[0]
        if key in replacements:
            indent = _INDENT_PATTERN.match(result[i]).group(0)
            result[i] = indent + replacements[key]
            logger.debug(f"Replaced: {line} -> {replacements[key]}")

    return result


def apply_fuzzy_search_replace(document: str, search: str, replace: str) -> str:
    """
    Applies one search/replace pair, skipping lines the search text omits.

    Steps:
    1. Take the first '[...]' line of the search text as the target header.
    2. Find that section in the document (no-op if missing).
    3. Pair search and replace parameter lines by position.
    4. Rewrite matching keys inside the section, keeping the document's indentation.

    Falls back to literal replacement when the search has no header or the
    parameter counts differ.
    """
    search_lines = search.strip().split("\n")
    replace_lines = replace.strip().split("\n")
    document_lines = document.split("\n")

    header_line = next((line for line in search_lines if line.strip().startswith("[")), None)
    if header_line is None:
        return apply_literal_replacement(document, search, replace)

    header = header_line.strip()
    bounds = find_section_bounds(document_lines, header)
    if bounds is None:
        logger.debug(f"Section {header} not found in content")
        return document

    search_params = extract_parameter_lines(search_lines)
    replace_params = extract_parameter_lines(replace_lines)

    if len(search_params) != len(replace_params):
        logger.debug(
            "Parameter count mismatch, falling back to exact match",
            search_count=len(search_params),
            replace_count=len(replace_params),
        )
        return apply_literal_replacement(document, search, replace)

    replacements = _build_replacement_map(search_params, replace_params)
    return "\n".join(_apply_replacements_in_section(document_lines, bounds, replacements))


def apply_edit_blocks(content: str, blocks: List[EditBlock]) -> str:
    """
    Applies blocks in order; each block sees the result of the previous one.
    """
    result = content

    for idx, block in enumerate(blocks):
        if not block.search or not block.replace:
            raise InvalidEditBlockError(f"Edit block {idx} has an empty search or replace side")

        logger.debug(f"Applying edit block {idx}", search=block.search, replace=block.replace)

        fuzzy_result = apply_fuzzy_search_replace(result, block.search, block.replace)
        if fuzzy_result == result:
            fuzzy_result = apply_literal_replacement(result, block.search, block.replace)
            if fuzzy_result == result:
                logger.warning(f"Edit block {idx} did not change the profile")
        result = fuzzy_result

    return result
