"""
Splits PP3 profile text into [Section] blocks.

A section is its header line plus every following raw line up to the next
header. Text before the first header is dropped.
"""

from typing import Callable, Iterable, List, Optional

import structlog

from pp3edit.models import ClassifiedSections, SplitResult

logger = structlog.get_logger(__name__)

SectionCallback = Callable[[str, str, int], None]


def is_header_line(line: str) -> bool:
    """Lenient check used by the splitter: only the leading '[' matters."""
    return line.strip().startswith("[")


def section_name(header_line: str) -> str:
    """
    Returns the section name of a header line.
    '[Exposure]' -> 'Exposure'. A missing ']' is tolerated: '[Foo' -> 'Foo'.
    """
    name = header_line.strip()
    if name.startswith("["):
        name = name[1:]
    if name.endswith("]"):
        name = name[:-1]
    return name


def name_of_section(section_text: str) -> str:
    """Name of an already split section, taken from its first line."""
    return section_name(section_text.split("\n", 1)[0])


def split_sections(content: str, on_section: Optional[SectionCallback] = None) -> SplitResult:
    """
    Splits content into sections based on [Header] lines.

    Args:
        content: Profile text.
        on_section: Optional callback fired as (section_text, section_name, index)
                    when each section is finalized.

    Returns:
        SplitResult with the trimmed section texts and the section names in order.
    """
    content = content.lstrip("\ufeff")
    if not content.strip():
        return SplitResult()

    sections: List[str] = []
    order: List[str] = []

    current_lines: List[str] = []
    current_name = ""

    def finalize():
        if not current_lines:
            return
        text = "\n".join(current_lines).strip()
        index = len(sections)
        sections.append(text)
        if on_section:
            on_section(text, current_name, index)

    for line in content.split("\n"):
        if is_header_line(line):
            finalize()
            current_name = section_name(line)
            current_lines = [line]
            order.append(current_name)
        elif current_lines:
            current_lines.append(line)

    finalize()

    logger.debug(f"Split profile into {len(sections)} sections")
    return SplitResult(sections=sections, order=order)


def classify_sections(content: str, allowed_names: Iterable[str]) -> ClassifiedSections:
    """
    Splits content and buckets each section by whether its name is in allowed_names.
    The order list always holds every section name.
    """
    allowed = set(allowed_names)
    included: List[str] = []
    excluded: List[str] = []

    def bucket(text: str, name: str, index: int):
        if name in allowed:
            included.append(text)
        else:
            excluded.append(text)

    result = split_sections(content, on_section=bucket)
    return ClassifiedSections(
        sections=result.sections,
        order=result.order,
        included=included,
        excluded=excluded,
    )
