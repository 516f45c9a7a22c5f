"""Tests for campaign configuration."""

import pytest

from anchors import BoxAnchor, TextAnchor
from campaigns import (
    ARTHRITIS, CAMPAIGNS, CFS, campaign_from_dict, campaign_to_dict, get_campaign, load_campaign,
)
from conftest import write_campaign


class TestBuiltins:
    def test_arthritis_constants(self):
        assert ARTHRITIS.name == TextAnchor(41, 41.4, 2.8)
        assert ARTHRITIS.name_color == "#33589e"
        assert ARTHRITIS.ink_color == "#1e3a8a"
        assert ARTHRITIS.signature_canvas == (1000, 400)
        assert ARTHRITIS.reset_screen == "editor"

    def test_cfs_differs_in_canvas_and_reset(self):
        assert CFS.signature_canvas == (800, 250)
        assert CFS.reset_screen == "intro"
        assert CFS.photo == ARTHRITIS.photo

    def test_registry(self):
        assert set(CAMPAIGNS) == {"arthritis", "cfs"}
        assert get_campaign("cfs") is CFS

    def test_unknown_campaign(self):
        with pytest.raises(ValueError, match="Unknown campaign"):
            get_campaign("nonexistent")


class TestOverrides:
    def test_json_file_overrides_base(self, tmp_path):
        path = write_campaign(tmp_path, {
            "base": "cfs",
            "name_color": "#000000",
            "signature": {"x": 10, "y": 20, "width": 30, "height": 40},
        })
        campaign = load_campaign(str(path))
        assert campaign.key == "cfs"
        assert campaign.name_color == "#000000"
        assert campaign.signature == BoxAnchor(10, 20, 30, 40)
        assert campaign.signature_canvas == (800, 250)

    def test_default_base_is_arthritis(self):
        campaign = campaign_from_dict({"file_prefix": "Test"})
        assert campaign.key == "arthritis"
        assert campaign.file_prefix == "Test"

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown campaign keys"):
            campaign_from_dict({"colour": "#fff"})

    def test_bad_anchor(self):
        with pytest.raises(ValueError, match="Bad anchor"):
            campaign_from_dict({"photo": {"x": 1, "y": 2}})

    def test_load_passes_campaign_through(self):
        assert load_campaign(CFS) is CFS
        assert load_campaign("arthritis") is ARTHRITIS

    def test_round_trip_through_dict(self):
        data = campaign_to_dict(ARTHRITIS)
        data.pop("key")
        assert campaign_from_dict(data) == ARTHRITIS
