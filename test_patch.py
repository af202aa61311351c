"""
Tests for pp3edit.patch — fuzzy search/replace with line skipping and literal fallback.

Run: python3 test_patch.py
From: repository root
"""

import sys

sys.path.insert(0, '.')

from pp3edit.models import EditBlock, InvalidEditBlockError
from pp3edit.patch import (
    apply_edit_blocks,
    apply_fuzzy_search_replace,
    apply_literal_replacement,
    extract_parameter_lines,
    find_section_bounds,
)

COLOR_TONING = (
    "[ColorToning]\nEnabled=false\nMethod=LabRegions\nLumamode=true\nTwocolor=Std\n"
    "Redlow=0\nGreenlow=0\nBluelow=0\nSatlow=0\nBalance=0"
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def test_find_section_bounds():
    lines = ["[A]", "x=1", "", "[B]", "y=2"]
    assert find_section_bounds(lines, "[A]") == (0, 3)
    assert find_section_bounds(lines, "[B]") == (3, 5)
    assert find_section_bounds(lines, "[C]") is None
    print("PASS: section bounds")


def test_find_section_bounds_needs_well_formed_next_header():
    lines = ["  [A]  ", "x=1", "[Broken", "y=2"]
    assert find_section_bounds(lines, "[A]") == (0, 4)
    print("PASS: malformed header does not end a section")


def test_extract_parameter_lines():
    assert extract_parameter_lines(["[S]", "", "  A=1 ", "B=2"]) == ["A=1", "B=2"]
    print("PASS: parameter lines extracted")


def test_literal_replacement():
    assert apply_literal_replacement("a\nA=1\nA=1", "  A=1\n", "A=2") == "a\nA=2\nA=1"
    assert apply_literal_replacement("a\nb", "zzz", "y") == "a\nb"
    assert apply_literal_replacement("a\nb", "   ", "y") == "a\nb"
    print("PASS: literal replacement")


# ---------------------------------------------------------------------------
# Fuzzy engine
# ---------------------------------------------------------------------------

def test_single_parameter_in_long_section():
    result = apply_fuzzy_search_replace(COLOR_TONING, "[ColorToning]\nRedlow=0", "[ColorToning]\nRedlow=25")
    assert result == COLOR_TONING.replace("Redlow=0", "Redlow=25")
    assert len(result.split("\n")) == 10
    print("PASS: single parameter changed, others untouched")


def test_indentation_taken_from_document():
    result = apply_fuzzy_search_replace("[S]\n  K=0", "[S]\nK=0", "[S]\nK=5")
    assert result == "[S]\n  K=5"
    print("PASS: document indentation kept")


def test_line_skipping_only_touches_named_parameters():
    document = "[Head]\nB=2\n[S]\nA=1\nB=2\nC=3\nD=4\n[T]\nB=2\nD=4"
    result = apply_fuzzy_search_replace(document, "[S]\nB=2\nD=4", "[S]\nB=20\nD=40")
    assert result == "[Head]\nB=2\n[S]\nA=1\nB=20\nC=3\nD=40\n[T]\nB=2\nD=4"
    print("PASS: line skipping")


def test_blank_lines_and_position_preserved():
    document = "[S]\nA=1\n\nB=2\n\n[T]\nA=1"
    result = apply_fuzzy_search_replace(document, "[S]\n\nB=2\n", "[S]\nB=3")
    assert result == "[S]\nA=1\n\nB=3\n\n[T]\nA=1"
    print("PASS: blank lines preserved")


def test_duplicate_keys_in_section_all_replaced():
    result = apply_fuzzy_search_replace("[S]\nK=0\nX=1\nK=0", "[S]\nK=0", "[S]\nK=9")
    assert result == "[S]\nK=9\nX=1\nK=9"
    print("PASS: duplicate keys replaced")


def test_key_match_is_case_sensitive():
    document = "[S]\nk=0\nK=0"
    assert apply_fuzzy_search_replace(document, "[S]\nK=0", "[S]\nK=1") == "[S]\nk=0\nK=1"
    print("PASS: case-sensitive keys")


def test_value_mismatch_still_replaces_by_key():
    # Only the key is matched; the old value in the search text does not have to match
    result = apply_fuzzy_search_replace("[S]\nK=3", "[S]\nK=0", "[S]\nK=5")
    assert result == "[S]\nK=5"
    print("PASS: matched by key")


def test_count_mismatch_falls_back_to_literal_noop():
    document = "[S]\nA=1\nB=2\nC=3"
    result = apply_fuzzy_search_replace(document, "[S]\nA=1\nC=3", "[S]\nA=5")
    assert result == document
    print("PASS: count mismatch leaves document unchanged")


def test_count_mismatch_literal_hit():
    result = apply_fuzzy_search_replace("[S]\nA=1\nB=2\n[T]\nC=3", "[S]\nA=1\nB=2", "[S]\nA=5")
    assert result == "[S]\nA=5\n[T]\nC=3"
    print("PASS: count mismatch uses literal replacement")


def test_missing_section_is_noop():
    document = "[S]\nA=1"
    assert apply_fuzzy_search_replace(document, "[NonExistent]\nA=1", "[NonExistent]\nA=2") == document
    print("PASS: missing section is a no-op")


def test_no_header_uses_literal_replacement():
    assert apply_fuzzy_search_replace("[S]\nA=1\nB=2", "A=1", "A=9") == "[S]\nA=9\nB=2"
    print("PASS: headerless search replaced literally")


def test_positional_pairing_mismatches_swapped_lines():
    # Pairing is by position: swapping lines in the replace side mixes up keys
    result = apply_fuzzy_search_replace("[S]\nA=1\nB=2", "[S]\nA=1\nB=2", "[S]\nB=20\nA=1")
    assert result == "[S]\nB=20\nA=1"
    assert result != "[S]\nA=1\nB=20"
    print("PASS: positional pairing documented")


# ---------------------------------------------------------------------------
# apply_edit_blocks
# ---------------------------------------------------------------------------

def test_blocks_compose_sequentially():
    document = "[S]\nA=1\nB=2\n[T]\nC=3"
    blocks = [
        EditBlock(search="[S]\nB=2", replace="[S]\nB=7"),
        EditBlock(search="[T]\nC=3", replace="[T]\nC=8"),
    ]
    assert apply_edit_blocks(document, blocks) == "[S]\nA=1\nB=7\n[T]\nC=8"
    print("PASS: blocks compose")


def test_later_block_sees_earlier_result():
    blocks = [
        EditBlock(search="[S]\nA=1", replace="[S]\nA=2"),
        EditBlock(search="A=2", replace="A=3"),
    ]
    assert apply_edit_blocks("[S]\nA=1", blocks) == "[S]\nA=3"
    print("PASS: sequential fold")


def test_edit_blocks_missing_section_unchanged():
    document = "[S]\nA=1"
    assert apply_edit_blocks(document, [EditBlock(search="[X]\nA=1", replace="[X]\nA=2")]) == document
    print("PASS: unmatched block leaves content unchanged")


def test_edit_blocks_reject_empty_side():
    try:
        apply_edit_blocks("[S]\nA=1", [EditBlock(search="[S]\nA=1", replace="")])
        assert False, "expected InvalidEditBlockError"
    except InvalidEditBlockError:
        pass
    print("PASS: empty block rejected")


if __name__ == "__main__":
    tests = [v for k, v in sorted(globals().items()) if k.startswith("test_") and callable(v)]

    passed = 0
    failed = 0
    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"FAIL: {test.__name__}: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print(f"\n{'='*60}")
    print(f"Results: {passed} passed, {failed} failed out of {len(tests)} tests")
    if failed == 0:
        print("ALL TESTS PASSED")
    else:
        print("SOME TESTS FAILED")
