"""
Rebuilds full profile text from split sections, in the original section order.
"""

import re
from typing import Dict, List, Optional

import structlog

from pp3edit.models import MissingSectionError, SectionChange
from pp3edit.sections import name_of_section, split_sections

logger = structlog.get_logger(__name__)

_INDENT_PATTERN = re.compile(r"^\s*")


def _find_section(name: str, sections: List[str]) -> Optional[str]:
    return next((section for section in sections if name_of_section(section) == name), None)


def reconstruct_profile(order: List[str], edited: List[str], included: List[str], excluded: List[str]) -> str:
    """
    Joins sections in the original order, preferring edited text over the
    untouched included text, then the excluded text.

    Raises:
        MissingSectionError: if a name in order has no section in any list.
    """
    parts = []
    for name in order:
        section = _find_section(name, edited)
        if section is None:
            section = _find_section(name, included)
        if section is None:
            section = _find_section(name, excluded)
        if section is None:
            raise MissingSectionError(f"Section [{name}] has no content to reconstruct from")
        parts.append(section)

    return "\n".join(parts)


def build_section_map(sections: List[str], order: List[str]) -> Dict[str, str]:
    """
    Maps section names to section text. The first section with a given name wins.
    """
    section_map: Dict[str, str] = {}
    for name, section in zip(order, sections):
        section_map.setdefault(name, section)
    return section_map


def apply_parameter_changes(section_text: str, parameters: Dict[str, str], section_name: str = "") -> str:
    """
    Replaces the first line of each named parameter with its new line,
    keeping the existing indentation. Unknown parameters are skipped.
    """
    lines = section_text.split("\n")

    for parameter_name, parameter_line in parameters.items():
        wanted = parameter_name.strip()
        index = next(
            (
                i
                for i, line in enumerate(lines)
                if i > 0 and "=" in line and line.split("=", 1)[0].strip() == wanted
            ),
            None,
        )

        if index is None:
            logger.warning(f"Parameter {parameter_name} not found in section [{section_name}]")
            continue

        indent = _INDENT_PATTERN.match(lines[index]).group(0)
        updated = indent + parameter_line
        if lines[index] != updated:
            logger.debug(f"Changed: {lines[index].strip()} -> {parameter_line}")
            lines[index] = updated

    return "\n".join(lines)


def apply_section_changes(section_map: Dict[str, str], changes: List[SectionChange]) -> None:
    """Applies changes to the section map in place. Unknown sections are skipped."""
    for change in changes:
        original = section_map.get(change.section_name)
        if original is None:
            logger.warning(f"Section [{change.section_name}] not found in original content")
            continue

        logger.debug(f"Applying changes to section [{change.section_name}]")
        section_map[change.section_name] = apply_parameter_changes(
            original, change.parameters, change.section_name
        )


def reconstruct_from_map(order: List[str], section_map: Dict[str, str]) -> str:
    return "\n".join(section_map[name] for name in order)


def apply_direct_section_changes(content: str, changes: List[SectionChange]) -> str:
    """
    Applies direct section changes to a full profile, keeping section order.
    """
    if not changes:
        logger.debug("No section changes to apply")
        return content

    split = split_sections(content)
    section_map = build_section_map(split.sections, split.order)
    apply_section_changes(section_map, changes)
    return reconstruct_from_map(split.order, section_map)
