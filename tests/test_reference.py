"""Tests for the reference index: players, teams, licensing and keywords."""

import json
import random
import shutil

import pytest

from cardscan.reference.index import ReferenceIndex
from cardscan.reference.loader import PACKAGED_DATA_DIR, load_data_file
from cardscan.reference.players import fold, last_name, strip_suffix
from cardscan.utils.error_handler import ReferenceDataError


class TestNameKeys:
    """Test name folding helpers."""

    def test_fold_strips_accents_and_case(self):
        """Accented names fold to plain uppercase keys."""
        assert fold("Ronald  Acuña Jr.") == "RONALD ACUNA JR."
        assert fold("Nikola Jokić") == "NIKOLA JOKIC"

    def test_strip_suffix(self):
        """Trailing generational suffixes are removed."""
        assert strip_suffix("KEN GRIFFEY JR.") == "KEN GRIFFEY"
        assert strip_suffix("CAL RIPKEN III") == "CAL RIPKEN"
        assert strip_suffix("MIKE TROUT") == "MIKE TROUT"

    def test_last_name_skips_suffix(self):
        """The last name is the last token that is not a suffix."""
        assert last_name("Ken Griffey Jr.") == "GRIFFEY"
        assert last_name("Charizard") is None


class TestPlayerLookup:
    """Test player lookup behaviour."""

    def test_last_name_lookup(self, reference):
        """A bare last name finds the player."""
        assert reference.players.find_player("TROUT").name == "Mike Trout"

    def test_suffix_tolerant_lookup(self, reference):
        """An extra generational suffix does not prevent a match."""
        assert reference.players.find_player("Mike Trout Jr").name == "Mike Trout"

    def test_case_and_accent_insensitive(self, reference):
        """Lookup ignores case and accents."""
        assert reference.players.find_player("mike trout").name == "Mike Trout"
        assert reference.players.find_player("RONALD ACUNA JR.").name == "Ronald Acuña Jr."
        assert reference.players.find_player("Acuna").name == "Ronald Acuña Jr."

    def test_nickname_lookup(self, reference):
        """Nicknames resolve to the player."""
        assert reference.players.find_player("The Kid").name == "Ken Griffey Jr."

    def test_no_partial_word_matches(self, reference):
        """Short fragments inside longer names do not match."""
        assert reference.players.find_player("RED") is None

    def test_unknown_and_empty(self, reference):
        """Unknown names and blank input give None."""
        assert reference.players.find_player("Unknown Person") is None
        assert reference.players.find_player("") is None
        assert reference.players.find_player("   ") is None

    def test_strict_lookup_skips_fuzzy(self, reference):
        """With fuzzy off only exact keys match."""
        assert reference.players.find_player("Mike Trout Jr", fuzzy=False) is None

    def test_is_known_player(self, reference):
        """Only full names and nicknames count as known."""
        assert reference.players.is_known_player("STEPHEN CURRY")
        assert reference.players.is_known_player("Chef Curry")
        assert not reference.players.is_known_player("CURRY")

    def test_is_rookie_year(self, reference):
        """Rookie year comes from rookie_year or the first active year."""
        players = reference.players

        assert players.is_rookie_year("Mike Trout", 2011)
        assert not players.is_rookie_year("Mike Trout", 2012)
        assert players.is_rookie_year("Mookie Betts", "2014")
        assert not players.is_rookie_year("Unknown Person", 2014)

    def test_players_for_sport(self, reference):
        """Players can be listed per sport."""
        hockey = reference.players.players_for_sport("Hockey")

        assert hockey
        assert all(p.sport == "Hockey" for p in hockey)
        assert len(reference.players.all_players()) > len(hockey)


class TestTeamLookup:
    """Test team lookup behaviour."""

    def test_full_name_and_short_name(self, reference):
        """City plus name and the bare name both resolve."""
        assert reference.players.find_team("Atlanta Braves").name == "Braves"
        assert reference.players.find_team("braves").name == "Braves"

    def test_abbreviation_prefers_sport(self, reference):
        """Shared abbreviations resolve by sport when one is given."""
        assert reference.players.find_team("BOS").name == "Red Sox"
        assert reference.players.find_team("BOS", sport="Basketball").name == "Celtics"

    def test_trailing_word_group(self, reference):
        """Leading noise words are dropped until a team name remains."""
        assert reference.players.find_team("The Atlanta Braves").name == "Braves"

    def test_fuzzy_team(self, reference):
        """Small misspellings still match."""
        assert reference.players.find_team("Yankes").name == "Yankees"

    def test_unknown_team(self, reference):
        """Unrelated words do not match any team."""
        assert reference.players.find_team("REFRACTOR") is None
        assert reference.players.find_team("") is None

    def test_validate_player_team(self, reference):
        """A player matches only the teams they played for."""
        players = reference.players

        assert players.validate_player_team("Mike Trout", "Angels")
        assert players.validate_player_team("Mike Trout", "Los Angeles Angels")
        assert not players.validate_player_team("Mike Trout", "Yankees")
        assert not players.validate_player_team("Unknown Person", "Angels")


class TestManufacturerRegistry:
    """Test era-correct licensing rules."""

    def test_era_correct_licensing(self, reference):
        """Panini held basketball in 2015; Upper Deck no longer did."""
        registry = reference.manufacturers

        assert registry.validate_manufacturer("Panini", "Basketball", 2015)
        assert not registry.validate_manufacturer("Upper Deck", "Basketball", 2015)

    def test_validate_is_case_insensitive(self, reference):
        """Manufacturer names match regardless of case."""
        assert reference.manufacturers.validate_manufacturer("panini", "Basketball", 2015)
        assert not reference.manufacturers.validate_manufacturer("Nobody", "Basketball", 2015)

    def test_valid_manufacturers(self, reference):
        """Valid manufacturers are listed in registry order."""
        registry = reference.manufacturers

        assert registry.get_valid_manufacturers("Basketball", 2015) == ["Panini"]
        assert registry.get_valid_manufacturers("Baseball", 1995) == [
            "Topps", "Bowman", "Upper Deck", "Fleer", "Donruss", "Score"
        ]
        assert registry.get_valid_manufacturers("Pokemon", 2000) == []

    def test_exclusive_rights(self, reference):
        """Exclusive licenses are reported per sport and year."""
        registry = reference.manufacturers

        assert registry.has_exclusive_rights("Panini", "Basketball", 2015)
        assert registry.has_exclusive_rights("Topps", "Baseball", 2015)
        assert not registry.has_exclusive_rights("Topps", "Baseball", 1995)
        assert not registry.has_exclusive_rights("Bowman", "Baseball", 2015)
        assert not registry.has_exclusive_rights("Nobody", "Baseball", 2015)

    def test_exclusive_manufacturer(self, reference):
        """The licensed holder of exclusive rights is found, if any."""
        registry = reference.manufacturers

        assert registry.exclusive_manufacturer("Baseball", 2015) == "Topps"
        assert registry.exclusive_manufacturer("Hockey", 2015) == "Upper Deck"
        assert registry.exclusive_manufacturer("Baseball", 1995) is None

    def test_set_licensee(self, reference):
        """Set names resolve to the manufacturer licensed to print them."""
        registry = reference.manufacturers

        assert registry.set_licensee("Donruss", "Football", 2021) == "Panini"
        assert registry.set_licensee("donruss", "Baseball", 1990) == "Donruss"
        assert registry.set_licensee("Donruss", "Basketball", 2005) is None

    def test_dominant_manufacturer(self, reference):
        """The first licensed primary manufacturer of the era dominates."""
        registry = reference.manufacturers

        assert registry.get_dominant_manufacturer("Basketball", 2015) == "Panini"
        assert registry.get_dominant_manufacturer("Baseball", 2015) == "Topps"
        assert registry.get_dominant_manufacturer("Hockey", 2015) == "Upper Deck"
        assert registry.get_dominant_manufacturer("Pokemon", 2000) is None

    def test_dominant_manufacturer_with_rng(self, reference):
        """With an rng the choice stays among licensed primaries."""
        registry = reference.manufacturers

        for seed in range(10):
            choice = registry.get_dominant_manufacturer("Baseball", 1995, random.Random(seed))
            assert choice in ("Topps", "Upper Deck", "Fleer")

    def test_realistic_manufacturer(self, reference):
        """Modern baseball rookies go to Bowman, everything else to the dominant manufacturer."""
        registry = reference.manufacturers

        assert registry.realistic_manufacturer("Baseball", 2023, is_rookie=True) == ("Bowman", "Bowman Chrome")
        assert registry.realistic_manufacturer("Baseball", 2023) == ("Topps", "Topps")
        assert registry.realistic_manufacturer("Baseball", 1995, is_rookie=True) == ("Topps", "Topps")
        assert registry.realistic_manufacturer("Basketball", 2015) == ("Panini", "Prizm")
        assert registry.realistic_manufacturer("Pokemon", 2000) is None

    def test_realistic_manufacturer_with_rng(self, reference):
        """An rng only picks among the manufacturer's sets."""
        registry = reference.manufacturers
        sets = registry.get_card_sets("Panini", "Basketball", 2015)

        manufacturer, set_name = registry.realistic_manufacturer("Basketball", 2015, rng=random.Random(3))

        assert manufacturer == "Panini"
        assert set_name in sets

    def test_realistic_manufacturer_prefers_exclusive_license(self, reference):
        """An exclusive licensee is chosen over other era primaries, whatever the rng."""
        registry = reference.manufacturers

        for seed in range(20):
            manufacturer, _ = registry.realistic_manufacturer("Baseball", 2015, rng=random.Random(seed))
            assert manufacturer == "Topps"

    def test_card_sets_and_era(self, reference):
        """Card sets come from the active license; eras cover year ranges."""
        registry = reference.manufacturers

        assert registry.get_card_sets("Topps", "Baseball", 2020)[0] == "Topps"
        assert registry.get_card_sets("Topps", "Basketball", 2015) == []
        assert registry.get_era("Baseball", 1995).primary == ("Topps", "Upper Deck", "Fleer")
        assert registry.get_era("Baseball", 1800) is None

    def test_format_set(self, reference):
        """Set names are qualified with their manufacturer once."""
        registry = reference.manufacturers

        assert registry.format_set("Panini", "Prizm") == "Panini Prizm"
        assert registry.format_set("Topps", "Topps Chrome") == "Topps Chrome"

    def test_manufacturers_in_text(self, reference):
        """Manufacturers are listed in order of appearance."""
        assert reference.manufacturers.manufacturers_in("2015 Upper Deck and Topps") == ["Upper Deck", "Topps"]
        assert reference.manufacturers.manufacturers_in("Toppsy") == []

    def test_sport_from_brand(self, reference):
        """Card-set keywords reveal the sport; multi-sport brands do not."""
        registry = reference.manufacturers

        assert registry.sport_from_brand("Panini Prizm", "PANINI PRIZM STEPHEN CURRY") == "Basketball"
        assert registry.sport_from_brand("Leaf Metal", "LEAF METAL") is None
        assert registry.sport_from_brand("Topps", "TOPPS") is None


class TestKeywordTables:
    """Test compiled keyword matchers."""

    def test_match_brand_longest_wins(self, reference):
        """The most specific brand keyword is reported."""
        brand = reference.keywords.match_brand("2023 Topps Chrome")

        assert brand.display == "Topps Chrome"
        assert brand.manufacturer == "Topps"
        assert reference.keywords.match_brand("Panini Prizm Silver").display == "Panini Prizm"

    def test_match_brand_whole_words(self, reference):
        """Brand keywords only match whole words."""
        assert reference.keywords.match_brand("UD Canvas").display == "Upper Deck"
        assert reference.keywords.match_brand("TOPPSTOWN") is None
        assert reference.keywords.match_brand("") is None

    def test_donruss_is_its_own_brand(self, reference):
        """Plain Donruss is not reported as a Panini product."""
        brand = reference.keywords.match_brand("1990 DONRUSS")

        assert brand.display == "Donruss"
        assert brand.manufacturer == "Donruss"
        assert reference.keywords.match_brand("Panini Donruss").display == "Panini Donruss"

    def test_find_group_keywords(self, reference):
        """Group keywords are found as whole words, multi-word first."""
        keywords = reference.keywords

        assert keywords.find("parallels", "Cracked Ice Parallel") == "CRACKED ICE"
        assert keywords.has("relic", "GAME-USED BAT")
        assert not keywords.has("relic", "BATTING")
        assert keywords.has("rookie", "2018 Topps Update RC")

    def test_sport_hits(self, reference):
        """Distinct sport keywords are counted per sport."""
        assert reference.keywords.sport_hits("NBA BASKETBALL REBOUNDS") == {"Basketball": 3}
        assert reference.keywords.sport_hits("nothing here") == {}

    def test_grade_label(self, reference):
        """Numeric grades map to condition labels."""
        keywords = reference.keywords

        assert keywords.grade_label("10") == "GEM MINT"
        assert keywords.grade_label("10.0") == "GEM MINT"
        assert keywords.grade_label("9.5") == "MINT+"
        assert keywords.grade_label("abc") is None

    def test_vocabulary(self, reference):
        """Card and player words both land in the shared vocabulary."""
        assert "TOPPS" in reference.keywords.vocabulary
        assert "REFRACTOR" in reference.vocabulary
        assert "TROUT" in reference.vocabulary


class TestReferenceLoading:
    """Test loading the versioned data files."""

    def test_packaged_snapshot(self, reference):
        """The default index comes from the packaged data directory."""
        assert reference.data_dir == PACKAGED_DATA_DIR
        assert reference.keywords.version
        assert reference.players.version

    def test_custom_data_dir(self, temp_dirs):
        """A copied data directory loads the same way."""
        for path in PACKAGED_DATA_DIR.glob("*.json"):
            shutil.copy(path, temp_dirs['data_dir'])

        index = ReferenceIndex.load(temp_dirs['data_dir'])

        assert index.players.find_player("TROUT").name == "Mike Trout"

    def test_missing_directory(self, temp_dirs):
        """A data directory that does not exist is a reference data error."""
        with pytest.raises(ReferenceDataError):
            ReferenceIndex.load(temp_dirs['temp_dir'] / "missing")

    def test_missing_file(self, temp_dirs):
        """An empty data directory is a reference data error."""
        with pytest.raises(ReferenceDataError, match="players.json"):
            ReferenceIndex.load(temp_dirs['data_dir'])

    def test_malformed_json(self, temp_dirs):
        """Unparseable JSON is reported with the file name."""
        (temp_dirs['data_dir'] / "players.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(ReferenceDataError, match="Could not read"):
            load_data_file(temp_dirs['data_dir'], "players.json")

    def test_non_object_payload(self, temp_dirs):
        """Top-level arrays are rejected."""
        (temp_dirs['data_dir'] / "players.json").write_text("[]", encoding="utf-8")

        with pytest.raises(ReferenceDataError, match="JSON object"):
            load_data_file(temp_dirs['data_dir'], "players.json")

    def test_missing_version(self, temp_dirs):
        """Every data file carries a version."""
        (temp_dirs['data_dir'] / "players.json").write_text(json.dumps({"players": {}}), encoding="utf-8")

        with pytest.raises(ReferenceDataError, match="Missing required fields"):
            load_data_file(temp_dirs['data_dir'], "players.json", required=("players",))


if __name__ == "__main__":
    pytest.main([__file__])
