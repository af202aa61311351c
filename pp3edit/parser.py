"""
Parsers for the two edit formats an AI response may use.

Search/replace blocks:

    <<<<<<< SEARCH
    [Exposure]
    Contrast=0
    =======
    [Exposure]
    Contrast=20
    >>>>>>> REPLACE

Direct section changes, usually inside a fenced code block:

    [Exposure]
    Contrast=20
"""

import re
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple

import structlog

from pp3edit.models import EditBlock, SectionChange

logger = structlog.get_logger(__name__)

SEARCH_MARKER = "<<<<<<< SEARCH"
DIVIDER_MARKER = "======="
REPLACE_MARKER = ">>>>>>> REPLACE"

# An opening fence may carry a language tag, but never one starting with '['
FENCED_BLOCK_PATTERN = re.compile(r"```(?:[^\[\n`][^\n]*)?\n?(.*?)```", re.DOTALL)


class ParseMode(str, Enum):
    IDLE = "IDLE"
    IN_SEARCH = "IN_SEARCH"
    IN_REPLACE = "IN_REPLACE"


class BlockParseState(NamedTuple):
    mode: ParseMode = ParseMode.IDLE
    search: Tuple[str, ...] = ()
    replace: Tuple[str, ...] = ()


def transition(state: BlockParseState, line: str) -> Tuple[BlockParseState, Optional[EditBlock]]:
    """
    Advances the search/replace state machine by one line.
    Returns the next state and the block completed by this line, if any.
    """
    if line.startswith(SEARCH_MARKER):
        return BlockParseState(mode=ParseMode.IN_SEARCH), None

    if line.startswith(DIVIDER_MARKER):
        if state.mode == ParseMode.IN_SEARCH:
            return state._replace(mode=ParseMode.IN_REPLACE), None
        return state, None

    if line.startswith(REPLACE_MARKER):
        search = "\n".join(state.search)
        replace = "\n".join(state.replace)
        block = None
        # Blank-only sides count as empty
        if search.strip() and replace.strip():
            block = EditBlock(search=search, replace=replace)
        return BlockParseState(), block

    if state.mode == ParseMode.IN_SEARCH:
        return state._replace(search=state.search + (line,)), None
    if state.mode == ParseMode.IN_REPLACE:
        return state._replace(replace=state.replace + (line,)), None
    return state, None


def parse_search_replace_blocks(text: str) -> List[EditBlock]:
    """
    Extracts SEARCH/REPLACE blocks from text.
    Blocks that are unterminated or have an empty side are dropped.
    """
    blocks: List[EditBlock] = []
    state = BlockParseState()

    for line in text.split("\n"):
        state, block = transition(state, line)
        if block is not None:
            blocks.append(block)

    if state.mode != ParseMode.IDLE:
        logger.debug("Dropping unterminated search/replace block", mode=state.mode.value)

    return blocks


def _extract_fenced_text(text: str) -> str:
    bodies = FENCED_BLOCK_PATTERN.findall(text)
    if bodies:
        return "\n".join(bodies)
    return text


def parse_direct_section_changes(text: str) -> List[SectionChange]:
    """
    Extracts [Section] headers and Name=value lines from an AI response.

    Fenced code blocks are scanned when present, otherwise the whole text.
    Parameter lines before any header are ignored; a repeated parameter
    keeps its last value.
    """
    changes: List[SectionChange] = []
    current_name: Optional[str] = None
    current_params: Dict[str, str] = {}

    for raw_line in _extract_fenced_text(text).split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith("[") and line.endswith("]"):
            if current_name is not None:
                changes.append(SectionChange(section_name=current_name, parameters=current_params))
            current_name = line[1:-1]
            current_params = {}
        elif "=" in line and current_name is not None:
            name = line.split("=", 1)[0]
            if name:
                current_params[name] = line

    if current_name is not None:
        changes.append(SectionChange(section_name=current_name, parameters=current_params))

    return changes
