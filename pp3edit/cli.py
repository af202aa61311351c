import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

import structlog

from pp3edit import __version__
from pp3edit.diff import generate_changes_from_profiles
from pp3edit.generation import apply_ai_response
from pp3edit.models import DEFAULT_SECTIONS, ProfileEditError
from pp3edit.parser import parse_direct_section_changes, parse_search_replace_blocks
from pp3edit.prompts import PROMPTS, build_generation_prompt
from pp3edit.sections import classify_sections


def _configure_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _read_text(path: Path) -> str:
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    with open(path, "r", encoding="utf-8-sig") as f:
        return f.read()


def _sections_arg(args) -> List[str]:
    return args.include or list(DEFAULT_SECTIONS)


def handle_sections(args):
    classified = classify_sections(_read_text(args.profile), _sections_arg(args))
    included = set(_sections_arg(args))
    for name in classified.order:
        marker = "*" if name in included else " "
        print(f"{marker} [{name}]")
    print(
        f"{len(classified.included)} editable, {len(classified.excluded)} passed through.",
        file=sys.stderr,
    )


def handle_parse(args):
    text = _read_text(args.response)

    changes = parse_direct_section_changes(text)
    blocks = [] if changes else parse_search_replace_blocks(text.replace("```", ""))

    if args.json:
        output = {
            "section_changes": [c.model_dump() for c in changes],
            "search_replace_blocks": [b.model_dump() for b in blocks],
        }
        print(json.dumps(output, indent=2))
        return

    if changes:
        print(f"Found {len(changes)} direct section changes:", file=sys.stderr)
        for change in changes:
            print(f"[{change.section_name}]")
            for line in change.parameters.values():
                print(f"  {line}")
    elif blocks:
        print(f"Found {len(blocks)} search/replace blocks:", file=sys.stderr)
        for block in blocks:
            print(f"[-] {block.search}")
            print(f"[+] {block.replace}")
    else:
        print("Warning: No edits found in response.", file=sys.stderr)


def handle_apply(args):
    base = _read_text(args.profile)
    response = _read_text(args.response)

    try:
        result = apply_ai_response(base, response, _sections_arg(args))
    except ProfileEditError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    output_path = args.output or args.profile.with_name(f"{args.profile.stem}_ai.pp3")
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(result)

    print(f"✅ Saved to {output_path}", file=sys.stderr)


def handle_diff(args):
    changes = generate_changes_from_profiles(_read_text(args.original), _read_text(args.modified))

    if args.json:
        print(json.dumps([c.model_dump() for c in changes], indent=2))
        return

    print(f"Found {sum(len(c.parameters) for c in changes)} changes:", file=sys.stderr)
    for change in changes:
        for line in change.parameters.values():
            print(f"[~] [{change.section_name}] {line}")


def handle_prompt(args):
    classified = classify_sections(_read_text(args.profile), _sections_arg(args))
    text = build_generation_prompt(classified.included_text, preset=args.preset)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"Prompt written to {args.output}", file=sys.stderr)
    else:
        print(text)


def _add_include_arg(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--include",
        action="append",
        metavar="NAME",
        help="Section name the AI may edit (repeatable, default: the standard editable sections)",
    )


def main(argv=None):
    parser = argparse.ArgumentParser(prog="pp3edit", description="pp3edit: AI-assisted RawTherapee profile editing")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every applied change to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Subcommands")

    p_sections = subparsers.add_parser("sections", help="List the sections of a profile")
    p_sections.add_argument("profile", type=Path, help="PP3 profile")
    _add_include_arg(p_sections)
    p_sections.set_defaults(func=handle_sections)

    p_parse = subparsers.add_parser("parse", help="Show the edits found in a saved AI response")
    p_parse.add_argument("response", type=Path, help="Text file with the AI response")
    p_parse.add_argument("--json", action="store_true", help="Output raw JSON edits")
    p_parse.set_defaults(func=handle_parse)

    p_apply = subparsers.add_parser("apply", help="Merge a saved AI response into a profile")
    p_apply.add_argument("profile", type=Path, help="Original PP3 profile")
    p_apply.add_argument("response", type=Path, help="Text file with the AI response")
    p_apply.add_argument("-o", "--output", type=Path, help="Output PP3 path (default: <profile>_ai.pp3)")
    _add_include_arg(p_apply)
    p_apply.set_defaults(func=handle_apply)

    p_diff = subparsers.add_parser("diff", help="Compare two profiles")
    p_diff.add_argument("original", type=Path, help="Original PP3 profile")
    p_diff.add_argument("modified", type=Path, help="Modified PP3 profile")
    p_diff.add_argument("--json", action="store_true", help="Output raw JSON section changes")
    p_diff.set_defaults(func=handle_diff)

    p_prompt = subparsers.add_parser("prompt", help="Print the generation prompt for a profile")
    p_prompt.add_argument("profile", type=Path, help="PP3 profile")
    p_prompt.add_argument("--preset", choices=sorted(PROMPTS), default="aggressive", help="Prompt preset")
    p_prompt.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    _add_include_arg(p_prompt)
    p_prompt.set_defaults(func=handle_prompt)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
