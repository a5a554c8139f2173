"""
Tests for the action resolver and the command context it reads.

Resolution is pure: names are looked up in a CommandContext snapshot,
no store is involved.
"""

from app.ai.command.context import (
    NOTES_PREVIEW_LENGTH,
    AVAILABLE_COLORS,
    AVAILABLE_ICONS,
    BinSummary,
    build_command_context,
    make_command_context,
    truncate_notes,
)
from app.ai.command.resolver import (
    normalize_name,
    resolve_action,
    resolve_actions,
    resolve_area,
    resolve_bin,
)
from app.ai.schemas.actions import parse_action
from app.services.inventory_store import AreaRecord, BinRecord


def _context():
    bins = [
        BinRecord(id="bin-tools", location_id="loc", name="Tools", short_code="AAAAAA",
                  items=["hammer"], area_id="area-garage", area_name="Garage"),
        BinRecord(id="bin-empty", location_id="loc", name="Empty Box", short_code="BBBBBB"),
        BinRecord(id="bin-tools-2", location_id="loc", name="tools", short_code="CCCCCC"),
    ]
    areas = [AreaRecord(id="area-garage", location_id="loc", name="Garage")]
    return make_command_context(bins, areas)


class TestCommandContext:
    """Tests for building the snapshot."""

    def test_vocabularies(self):
        context = _context()

        assert len(context.available_colors) == 14
        assert len(context.available_icons) == 30
        assert "Wrench" in AVAILABLE_ICONS
        assert "gray" in AVAILABLE_COLORS

    def test_notes_truncated(self):
        long_notes = "x" * (NOTES_PREVIEW_LENGTH + 50)

        assert truncate_notes(long_notes) == "x" * NOTES_PREVIEW_LENGTH + "..."
        assert truncate_notes(None) == ""
        assert truncate_notes("short") == "short"

    def test_summary_from_record(self):
        record = BinRecord(id="b", location_id="loc", name="Tools", short_code="AAAAAA",
                           items=["hammer"], tags=["tools"], notes="n" * 500)

        summary = BinSummary.from_record(record)

        assert summary.items == ("hammer",)
        assert summary.notes.endswith("...")

    def test_to_dict(self):
        data = _context().to_dict()

        assert data["bins"][0]["name"] == "Tools"
        assert data["bins"][0]["area_name"] == "Garage"
        assert data["areas"] == [{"id": "area-garage", "name": "Garage"}]

    def test_build_from_store(self, store, test_location, bins, garage):
        context = build_command_context(store, test_location.id)

        assert {b.name for b in context.bins} == {"Tools", "Empty Box", "Batteries"}
        tools = next(b for b in context.bins if b.name == "Tools")
        assert tools.area_name == "Garage"
        assert [a.name for a in context.areas] == ["Garage"]

    def test_other_locations_not_included(self, store, other_location, bins):
        context = build_command_context(store, other_location.id)

        assert context.bins == ()


class TestResolveBin:
    """Tests for name lookup."""

    def test_normalize_name(self):
        assert normalize_name("  Empty BOX ") == "empty box"
        assert normalize_name(None) == ""

    def test_case_insensitive(self):
        assert resolve_bin("EMPTY BOX", _context()) == "bin-empty"

    def test_whitespace_ignored(self):
        assert resolve_bin("  Empty Box  ", _context()) == "bin-empty"

    def test_first_match_wins(self):
        """Two bins differing only in case: context order decides."""
        assert resolve_bin("TOOLS", _context()) == "bin-tools"

    def test_no_fuzzy_matching(self):
        assert resolve_bin("Tool", _context()) is None
        assert resolve_bin("Empty", _context()) is None

    def test_blank_name(self):
        assert resolve_bin("  ", _context()) is None

    def test_resolve_area(self):
        context = _context()

        assert resolve_area("garage", context.areas) == "area-garage"
        assert resolve_area("Attic", context.areas) is None


class TestResolveAction:
    """Tests for resolve_action / resolve_actions."""

    def test_bin_id_attached(self):
        action = parse_action({"type": "add_items", "bin_name": "tools", "items": ["saw"]})

        resolved = resolve_action(action, _context())

        assert resolved.bin_id == "bin-tools"
        assert resolved.items == ["saw"]

    def test_original_not_mutated(self):
        action = parse_action({"type": "delete_bin", "bin_name": "Empty Box"})

        resolve_action(action, _context())

        assert action.bin_id is None

    def test_unknown_bin_dropped(self):
        action = parse_action({"type": "delete_bin", "bin_name": "Nonexistent"})

        assert resolve_action(action, _context()) is None

    def test_create_bin_passes_through(self):
        action = parse_action({"type": "create_bin", "name": "Holiday", "area_name": "Attic"})

        assert resolve_action(action, _context()) is action

    def test_set_area_existing(self):
        action = parse_action({"type": "set_area", "bin_name": "Empty Box", "area_name": "GARAGE"})

        resolved = resolve_action(action, _context())

        assert resolved.bin_id == "bin-empty"
        assert resolved.area_id == "area-garage"

    def test_set_area_new_area_left_unresolved(self):
        action = parse_action({"type": "set_area", "bin_name": "Empty Box", "area_name": "Attic"})

        resolved = resolve_action(action, _context())

        assert resolved.bin_id == "bin-empty"
        assert resolved.area_id is None
        assert resolved.area_name == "Attic"

    def test_set_area_unknown_area_id_dropped(self):
        action = parse_action({"type": "set_area", "bin_name": "Empty Box", "area_id": "area-gone"})

        assert resolve_action(action, _context()) is None

    def test_resolve_actions_keeps_order(self):
        actions = [
            parse_action({"type": "add_items", "bin_name": "Tools", "items": ["saw"]}),
            parse_action({"type": "delete_bin", "bin_name": "Nonexistent"}),
            parse_action({"type": "create_bin", "name": "Holiday"}),
            parse_action({"type": "delete_bin", "bin_name": "Empty Box"}),
        ]

        resolved = resolve_actions(actions, _context())

        assert [a.type for a in resolved] == ["add_items", "create_bin", "delete_bin"]
        assert len(actions) == 4
