"""Unit tests for snapping analysis colors onto the palette."""

import pytest

from prompt_creator.services.colors import format_for_request, reconcile_many, reconcile_one
from prompt_creator.services.palette import Color, PALETTE, distance, nearest


class TestReconcileOne:

    def test_close_color_snaps(self):
        assert reconcile_one("#FF0001") == Color(255, 0, 0)

    def test_far_color_stays_custom(self):
        assert reconcile_one("#123456") == Color.parse("#123456")

    def test_palette_color_unchanged(self):
        for entry in PALETTE:
            assert reconcile_one(entry.color) == entry.color

    def test_threshold_is_inclusive(self):
        # (0, 0, 60) is exactly 60 away from black
        assert reconcile_one(Color(0, 0, 60), threshold=60) == Color(0, 0, 0)
        assert reconcile_one(Color(0, 0, 61), threshold=60) == Color(0, 0, 61)

    def test_zero_threshold_snaps_only_exact(self):
        assert reconcile_one("#FF0001", threshold=0) == Color(255, 0, 1)
        assert reconcile_one("#FF0000", threshold=0) == Color(255, 0, 0)

    def test_threshold_from_settings(self, monkeypatch):
        from prompt_creator.core.config import settings
        monkeypatch.setattr(settings, "palette_snap_threshold", 0.5)
        assert reconcile_one("#FF0001") == Color(255, 0, 1)

    @pytest.mark.parametrize("code", ["#FF0001", "#123456", "#0A0A0A", "#FFF", "#8800FF", "#FF1490"])
    def test_idempotent(self, code):
        once = reconcile_one(code)
        assert reconcile_one(once) == once

    @pytest.mark.parametrize("code", ["#FF0001", "#0A0A0A", "#8800FF", "#FF1490", "#EEEEEE"])
    def test_snapped_color_is_the_nearest(self, code):
        color = Color.parse(code)
        result = reconcile_one(color)
        entry, d = nearest(color)
        if result != color:
            assert result == entry.color
            assert distance(color, result) == d <= 60


class TestReconcileMany:

    def test_scenario_mixed(self):
        assert reconcile_many(["#FF0001", "#000000"]) == [Color(255, 0, 0), Color(0, 0, 0)]

    def test_duplicates_after_snapping_collapse(self):
        result = reconcile_many(["#FF0001", "#FE0000", "#ff0000", "#123456"])
        assert result == [Color(255, 0, 0), Color.parse("#123456")]

    def test_order_is_first_seen(self):
        result = reconcile_many(["#000000", "#FFFFFF", "#010101"])
        assert result == [Color(0, 0, 0), Color(255, 255, 255)]

    def test_empty(self):
        assert reconcile_many([]) == []


class TestFormatForRequest:

    def test_palette_colors_become_names(self):
        assert format_for_request([Color(255, 0, 0), Color(0, 0, 0)]) == ["red", "black"]

    def test_custom_colors_stay_hex(self):
        assert format_for_request([Color.parse("#123456")]) == ["#123456"]

    def test_manual_palette_color_is_named_too(self):
        # A hand-picked color equal to a palette entry is indistinguishable from a snapped one
        assert format_for_request([Color.parse("#007aff"), Color.parse("#ff1493")]) == ["blue", "pink"]

    def test_end_to_end_snap_then_format(self):
        assert format_for_request(reconcile_many(["#FF0001", "#000000"])) == ["red", "black"]


class TestReconcileManyIdempotence:

    @pytest.mark.parametrize("codes", [
        ["#FF0001", "#000000"],
        ["#123456", "#FF0001", "#FE0101", "#123456", "#FFFFFF"],
        ["#0A0A0A", "#C0FFEE", "#8800FF", "#9D00FF", "#7F7FFF"],
        [],
    ])
    def test_idempotent(self, codes):
        once = reconcile_many(codes)
        assert reconcile_many(once) == once
