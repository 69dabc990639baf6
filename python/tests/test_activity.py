"""Tests for the activity value objects: validation and serialized shape."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from richpresence._activity import (
    Activity,
    ActivityType,
    Assets,
    Button,
    Party,
    Timestamps,
)


# ─── Timestamps ───────────────────────────────────────────────────────────────

class TestTimestamps:
    def test_unset_is_empty(self):
        assert Timestamps().to_dict() == {}

    def test_start_only(self):
        assert Timestamps(start=1700000000).to_dict() == {"start": 1700000000}

    def test_start_and_end(self):
        ts = Timestamps()
        ts.start = 10
        ts.end = 20
        assert ts.to_dict() == {"start": 10, "end": 20}

    def test_float_truncated(self):
        assert Timestamps(start=12.9).start == 12

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            Timestamps(start=-1)

    def test_non_number_rejected(self):
        with pytest.raises(TypeError):
            Timestamps(end="soon")


# ─── Party ────────────────────────────────────────────────────────────────────

class TestParty:
    def test_current_above_max_rejected(self):
        with pytest.raises(ValueError):
            Party(current_size=6, max_size=5)

    def test_setter_current_above_max_rejected(self):
        p = Party(max_size=5)
        with pytest.raises(ValueError):
            p.current_size = 6
        assert p.current_size == 0

    def test_setter_max_below_current_rejected(self):
        p = Party()
        p.current_size = 3
        with pytest.raises(ValueError):
            p.max_size = 2

    def test_sizes_in_order(self):
        p = Party()
        p.id = "test"
        p.current_size = 2
        p.max_size = 5
        assert p.to_dict() == {"id": "test", "size": [2, 5]}

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            Party(current_size=-1)

    def test_empty_party(self):
        assert Party().to_dict() == {}

    def test_size_without_id(self):
        assert Party(current_size=1, max_size=4).to_dict() == {"size": [1, 4]}

    def test_bool_size_rejected(self):
        with pytest.raises(TypeError):
            Party(current_size=True, max_size=2)


# ─── Assets ───────────────────────────────────────────────────────────────────

class TestAssets:
    def test_empty(self):
        assert Assets().to_dict() == {}

    def test_only_set_keys(self):
        a = Assets(large_image="logo")
        a.small_text = "hover"
        assert a.to_dict() == {"large_image": "logo", "small_text": "hover"}

    def test_key_order(self):
        a = Assets("li", "lt", "si", "st")
        assert list(a.to_dict()) == ["large_image", "large_text", "small_image", "small_text"]


# ─── Button ───────────────────────────────────────────────────────────────────

class TestButton:
    def test_serialize(self):
        assert Button("Test", "https://example.com").to_dict() == {
            "label": "Test",
            "url": "https://example.com",
        }

    def test_label_40_chars_rejected(self):
        with pytest.raises(ValueError):
            Button("x" * 40, "https://example.com")

    def test_label_limit(self):
        Button("x" * 31, "u")
        with pytest.raises(ValueError):
            Button("x" * 32, "u")

    def test_url_limit(self):
        Button("b", "u" * 511)
        with pytest.raises(ValueError):
            Button("b", "u" * 512)

    def test_setter_keeps_old_value_on_error(self):
        b = Button("ok", "u")
        with pytest.raises(ValueError):
            b.label = "y" * 33
        assert b.label == "ok"


# ─── Activity ─────────────────────────────────────────────────────────────────

class TestActivity:
    def test_empty_serialization(self):
        assert Activity().to_dict() == {"type": 0, "timestamps": {}, "assets": {}}

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            Activity(name="")
        act = Activity(name="ok")
        with pytest.raises(ValueError):
            act.name = ""
        assert act.name == "ok"

    def test_type_enum(self):
        act = Activity(name="x", type=ActivityType.WATCHING)
        assert act.to_dict()["type"] == 3
        act.type = 2
        assert act.type is ActivityType.LISTENING

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            Activity(type=1)

    def test_at_most_two_buttons(self):
        act = Activity(name="x")
        act.add_button(Button("a", "https://a"))
        act.add_button(Button("b", "https://b"))
        with pytest.raises(ValueError):
            act.add_button(Button("c", "https://c"))
        assert len(act.buttons) == 2

    def test_clear_buttons(self):
        act = Activity(name="x", buttons=[Button("a", "https://a")])
        act.clear_buttons()
        assert "buttons" not in act.to_dict()

    def test_full_serialization_order(self):
        act = Activity(name="drpc", client_id=1355907951155740785)
        act.details = "Line 1"
        act.state = "Party"
        act.timestamps.start = 1700000000
        act.assets.large_image = "my_image"
        act.assets.large_text = "You hovered over the large image"
        act.party = Party("test", 2, 5)
        act.add_button(Button("Test", "https://yooksch.com"))
        act.add_button(Button("Test 2", "https://youtu.be/dQw4w9WgXcQ"))

        data = act.to_dict()
        assert list(data) == [
            "name", "client_id", "type", "details", "state",
            "timestamps", "party", "assets", "buttons",
        ]
        assert data["client_id"] == 1355907951155740785
        assert data["party"] == {"id": "test", "size": [2, 5]}
        assert data["buttons"][1] == {"label": "Test 2", "url": "https://youtu.be/dQw4w9WgXcQ"}

    def test_copy_is_independent(self):
        act = Activity(name="a", party=Party("p", 1, 2))
        act.timestamps.start = 5
        dup = act.copy()
        act.name = "b"
        act.timestamps.start = 6
        act.party.max_size = 9
        assert dup.name == "a"
        assert dup.timestamps.start == 5
        assert dup.party.max_size == 2

    def test_wrong_types(self):
        with pytest.raises(TypeError):
            Activity(party="lobby")
        with pytest.raises(TypeError):
            Activity(name="x").add_button(("a", "b"))
        with pytest.raises(TypeError):
            Activity(details=3)
