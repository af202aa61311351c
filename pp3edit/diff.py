from typing import Dict, List

import structlog
from diff_match_patch import diff_match_patch

from pp3edit.models import SectionChange
from pp3edit.reconstruct import build_section_map
from pp3edit.sections import split_sections

logger = structlog.get_logger(__name__)


def _changed_lines(original: str, modified: str) -> List[str]:
    """
    Line-level diff of two section texts. Returns the lines present only in modified.
    """
    dmp = diff_match_patch()

    # Encode each line as a single char so the diff works on whole lines
    chars1, chars2, line_array = dmp.diff_linesToChars(original + "\n", modified + "\n")
    diffs = dmp.diff_main(chars1, chars2, False)
    dmp.diff_charsToLines(diffs, line_array)

    inserted = []
    for op, text in diffs:
        if op == 1:
            inserted.extend(line for line in text.split("\n") if line.strip())
    return inserted


def generate_changes_from_profiles(original: str, modified: str) -> List[SectionChange]:
    """
    Derives direct section changes that turn original into modified.

    Only parameter value changes in sections present in both profiles are
    reported. Added sections are ignored since they cannot be applied.
    """
    orig_split = split_sections(original)
    mod_split = split_sections(modified)
    orig_map = build_section_map(orig_split.sections, orig_split.order)
    mod_map = build_section_map(mod_split.sections, mod_split.order)

    changes = []
    for name, mod_section in mod_map.items():
        orig_section = orig_map.get(name)
        if orig_section is None:
            logger.info(f"Ignoring section [{name}] missing from the original profile")
            continue
        if orig_section == mod_section:
            continue

        parameters: Dict[str, str] = {}
        for line in _changed_lines(orig_section, mod_section):
            stripped = line.strip()
            if stripped.startswith("[") or "=" not in stripped:
                continue
            parameters[stripped.split("=", 1)[0]] = stripped

        if parameters:
            changes.append(SectionChange(section_name=name, parameters=parameters))

    return changes
