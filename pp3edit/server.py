import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from mcp.server.fastmcp import FastMCP

from pp3edit.diff import generate_changes_from_profiles
from pp3edit.generation import apply_ai_response
from pp3edit.models import DEFAULT_SECTIONS
from pp3edit.prompts import build_generation_prompt
from pp3edit.sections import classify_sections

# --- LOGGING CONFIGURATION ---
# MCP communicates over stdio, so every log line goes to stderr.
logging.basicConfig(stream=sys.stderr, level=logging.INFO, force=True)

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)

mcp = FastMCP("PP3 Profile Editing Service")


def _read_text(path: str) -> str:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with open(p, "r", encoding="utf-8-sig") as f:
        return f.read()


@mcp.tool()
def read_profile_sections(file_path: str, sections: Optional[List[str]] = None) -> str:
    """
    Lists the sections of a PP3 profile and returns the text of the editable ones.

    Args:
        file_path: Absolute path to the .pp3 file.
        sections: Section names the AI may edit. Defaults to the standard editable sections.
    """
    try:
        classified = classify_sections(_read_text(file_path), sections or DEFAULT_SECTIONS)
        header = f"Sections: {', '.join(classified.order)}"
        return f"{header}\n\n{classified.included_text}"
    except Exception as e:
        return f"Error reading profile: {str(e)}"


@mcp.tool()
def build_edit_prompt(file_path: str, preset: str = "aggressive", sections: Optional[List[str]] = None) -> str:
    """
    Builds the editing prompt (instructions, parameter ranges and editable sections) for a profile.

    Args:
        file_path: Absolute path to the .pp3 file.
        preset: aggressive, creative, balanced or technical.
        sections: Section names the AI may edit.
    """
    try:
        classified = classify_sections(_read_text(file_path), sections or DEFAULT_SECTIONS)
        return build_generation_prompt(classified.included_text, preset=preset)
    except Exception as e:
        return f"Error building prompt: {str(e)}"


@mcp.tool()
def apply_ai_response_to_profile(
    profile_path: str,
    response_text: str,
    output_path: Optional[str] = None,
    sections: Optional[List[str]] = None,
) -> str:
    """
    Merges an AI response into a profile and saves the result.

    The response may list final values per section (fenced '[Section]' blocks with
    'Name=value' lines) or use SEARCH/REPLACE blocks. Only the named parameters change;
    every other line keeps its content and position.

    Args:
        profile_path: Absolute path to the source .pp3 file.
        response_text: The raw AI response.
        output_path: Optional. Defaults to '<profile>_ai.pp3' next to the source.
        sections: Section names SEARCH/REPLACE blocks may edit.
    """
    try:
        result = apply_ai_response(_read_text(profile_path), response_text, sections or DEFAULT_SECTIONS)

        if not output_path:
            p = Path(profile_path)
            output_path = str(p.parent / f"{p.stem}_ai{p.suffix}")

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(result)

        return f"Saved to: {output_path}"
    except Exception as e:
        return f"Error applying response: {str(e)}"


@mcp.tool()
def diff_profiles(original_path: str, modified_path: str) -> str:
    """
    Lists the parameter values that differ between two profiles.

    Args:
        original_path: Path to the base profile.
        modified_path: Path to the edited profile.
    """
    try:
        changes = generate_changes_from_profiles(_read_text(original_path), _read_text(modified_path))
        if not changes:
            return "No parameter differences found between the profiles."

        output = []
        for change in changes:
            output.append(f"[{change.section_name}]")
            output.extend(change.parameters.values())
            output.append("")
        return "\n".join(output)
    except Exception as e:
        return f"Error computing diff: {str(e)}"


def main():
    mcp.run()


if __name__ == "__main__":
    main()
