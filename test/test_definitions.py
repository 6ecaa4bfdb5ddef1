"""
Tests for the card model and the district table loader.
"""

import pytest

from citadels.engine.definitions import (
    ALL_ROLES,
    DistrictCard,
    Role,
    info_text,
    load_district_deck,
    parse_district_table,
)


# ===== Roles =====

class TestRole:
    def test_eight_roles_ranked_one_to_eight(self):
        assert [r.rank for r in ALL_ROLES] == list(range(1, 9))
        assert ALL_ROLES[0] == Role.ASSASSIN
        assert ALL_ROLES[-1] == Role.WARLORD

    def test_display_name(self):
        assert Role.KING.display_name == "King"
        assert Role.ARCHITECT.display_name == "Architect"

    def test_from_name_is_case_insensitive(self):
        assert Role.from_name("king") == Role.KING
        assert Role.from_name(" WARLORD ") == Role.WARLORD
        assert Role.from_name("Jester") is None
        assert Role.from_name(None) is None

    def test_from_rank(self):
        assert Role.from_rank(5) == Role.BISHOP
        assert Role.from_rank("3") == Role.MAGICIAN
        assert Role.from_rank(9) is None
        assert Role.from_rank("x") is None


# ===== District cards =====

class TestDistrictCard:
    def test_color_is_normalised(self):
        assert DistrictCard("Manor", "Yellow", 3).color == "yellow"

    def test_unknown_color_rejected(self):
        with pytest.raises(ValueError):
            DistrictCard("Manor", "orange", 3)

    def test_negative_cost_rejected(self):
        with pytest.raises(ValueError):
            DistrictCard("Manor", "yellow", -1)

    def test_only_purple_cards_carry_ability_text(self):
        with pytest.raises(ValueError):
            DistrictCard("Manor", "yellow", 3, ability="Does things")
        keep = DistrictCard("Keep", "purple", 3, ability="Cannot be destroyed")
        assert keep.is_purple
        assert keep.ability == "Cannot be destroyed"

    def test_copies_compare_equal(self):
        assert DistrictCard("Tavern", "green", 1) == DistrictCard("Tavern", "green", 1)

    def test_is_named_ignores_case(self):
        assert DistrictCard("Great Wall", "purple", 6).is_named("great wall")

    def test_from_dict_drops_ability_on_non_purple(self):
        c = DistrictCard.from_dict({"name": "Market", "color": "green", "cost": 2, "ability": "x"})
        assert c.ability is None
        assert c.to_dict() == {"name": "Market", "color": "green", "cost": 2}

    @pytest.mark.parametrize("data", [
        {"color": "green", "cost": 2},
        {"name": "Market", "cost": 2},
        {"name": "Market", "color": "green", "cost": "two"},
        {"name": "Market", "color": "green", "cost": True},
        "Market",
    ])
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(ValueError):
            DistrictCard.from_dict(data)


# ===== Loader =====

class TestDistrictTable:
    def test_rows_expand_by_quantity(self):
        lines = [
            "name\tquantity\tcolor\tcost\tability",
            "Tavern\t3\tgreen\t1",
            "",
            "Keep\t2\tpurple\t3\tCannot be destroyed by the Warlord.",
        ]
        cards = parse_district_table(lines)
        assert [c.name for c in cards] == ["Tavern"] * 3 + ["Keep"] * 2
        assert cards[-1].ability == "Cannot be destroyed by the Warlord."

    def test_bad_rows_are_reported_and_skipped(self, capsys):
        lines = [
            "header",
            "Short\t1\tred",
            "Bad numbers\tx\tred\t1",
            "\t1\tred\t1",
            "Zero\t0\tred\t1",
            "Weird\t1\tpink\t1",
            "Prison\t1\tred\t2",
        ]
        cards = parse_district_table(lines)
        assert [c.name for c in cards] == ["Prison"]
        err = capsys.readouterr().err
        assert err.count("Skipping") == 5

    def test_ability_on_non_purple_row_is_dropped(self):
        cards = parse_district_table(["h", "Manor\t1\tyellow\t3\tshiny"])
        assert cards[0].ability is None

    def test_default_table(self):
        deck = load_district_deck()
        assert len(deck) == 67
        names = {c.name for c in deck}
        assert {"Keep", "Great Wall", "School of Magic", "Museum", "Haunted City"} <= names

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_district_deck(tmp_path / "nope.tsv")

    def test_loaded_deck_is_shuffled_by_rng(self, tmp_path):
        import random

        path = tmp_path / "deck.tsv"
        path.write_text("h\n" + "".join(f"D{i}\t1\tred\t{i}\n" for i in range(10)), encoding="utf-8")
        first = [c.name for c in load_district_deck(path, rng=random.Random(7))]
        second = [c.name for c in load_district_deck(path, rng=random.Random(7))]
        assert first == second
        assert sorted(first) == sorted(f"D{i}" for i in range(10))


def test_info_text():
    assert info_text("king").startswith("King:")
    assert info_text("Great Wall").startswith("Great Wall:")
    assert info_text("Tavern") is None
