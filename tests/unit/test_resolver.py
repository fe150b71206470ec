"""
Tests for tiered reference resolution.
"""

import pytest

from scoresheet.models.reference import ReferenceCatalog, TeamEntry
from scoresheet.normalization.normalizer import AliasNormalizer
from scoresheet.resolution.resolver import ReferenceResolver


@pytest.fixture
def normalizer():
    return AliasNormalizer(
        {
            "teams_first": {"阪神": "阪神タイガース", "巨人": "読売ジャイアンツ"},
            "teams_farm": {"阪神": "阪神タイガース（ファーム）"},
            "stadiums": {"甲子園": "阪神甲子園球場"},
            "clubs": {"ジャイアンツ": "読売", "タイガース": "阪神"},
        }
    )


@pytest.fixture
def resolver(catalog, normalizer):
    return ReferenceResolver(catalog, normalizer)


class TestStrict:
    """Tests for strict (canonicalized equality) matching"""

    def test_exact_names(self, resolver):
        assert resolver.resolve_team_id_strict("阪神タイガース") == 1
        assert resolver.resolve_stadium_id_strict("東京ドーム") == 101
        assert resolver.resolve_club_id_strict("読売") == 20

    def test_whitespace_and_invisible_chars_ignored(self, resolver):
        assert resolver.resolve_team_id_strict("  阪神タイガース\u200b ") == 1
        assert resolver.resolve_stadium_id_strict("東京ドーム\ufeff") == 101

    def test_misses(self, resolver):
        assert resolver.resolve_team_id_strict("阪神") is None
        assert resolver.resolve_team_id_strict(None) is None
        assert resolver.resolve_club_id_strict("") is None


class TestTeamFuzzy:
    """Tests for resolve_team_id_fuzzy tiers"""

    def test_alias_tier(self, resolver):
        assert resolver.resolve_team_id_fuzzy("阪神", "First") == 1
        assert resolver.resolve_team_id_fuzzy("巨人", "First") == 2

    def test_alias_category_follows_level(self, resolver):
        assert resolver.resolve_team_id_fuzzy("阪神", "Farm") == 11

    def test_strict_tier_wins_first(self, resolver):
        assert resolver.resolve_team_id_fuzzy("読売ジャイアンツ", "First") == 2

    def test_whitespace_variants_resolve_identically(self, resolver):
        assert (
            resolver.resolve_team_id_fuzzy("阪神 ", "First")
            == resolver.resolve_team_id_fuzzy(" 阪神", "First")
            == resolver.resolve_team_id_fuzzy("阪神", "First")
            == 1
        )

    def test_club_derived_tier(self, resolver):
        """No team alias: resolve as a club, then pick that club's team by level"""
        assert resolver.resolve_team_id_fuzzy("ジャイアンツ", "First") == 2
        assert resolver.resolve_team_id_fuzzy("ジャイアンツ", "Farm") == 12
        assert resolver.resolve_team_id_fuzzy("読売", "Farm") == 12

    def test_no_match(self, resolver):
        assert resolver.resolve_team_id_fuzzy("ﾊﾟ", "First") is None

    def test_ambiguous_club_is_no_match(self, normalizer):
        catalog = ReferenceCatalog(
            teams=[
                TeamEntry(id=1, name="A1", level="First", club_id=5),
                TeamEntry(id=2, name="A2", level="First", club_id=5),
            ],
            clubs=[{"club_id": 5, "club_name": "A"}],
        )
        resolver = ReferenceResolver(catalog, normalizer)
        assert resolver.resolve_team_id_fuzzy("A", "First") is None

    def test_invalid_level_rejected(self, resolver):
        with pytest.raises(ValueError):
            resolver.resolve_team_id_fuzzy("阪神", "Major")

    def test_without_normalizer_only_strict_and_club(self, catalog):
        resolver = ReferenceResolver(catalog)
        assert resolver.resolve_team_id_fuzzy("阪神", "First") == 1  # via club name
        assert resolver.resolve_team_id_fuzzy("巨人", "First") is None


class TestSingleTeamCatalog:
    """Single team, single alias"""

    def test_alias_and_miss(self):
        catalog = ReferenceCatalog(
            teams=[TeamEntry(id=1, name="阪神タイガース", level="First", club_id=10)]
        )
        resolver = ReferenceResolver(
            catalog, AliasNormalizer({"teams_first": {"阪神": "阪神タイガース"}})
        )
        assert resolver.resolve_team_id_fuzzy("阪神", "First") == 1
        assert resolver.resolve_team_id_fuzzy("ﾊﾟ", "First") is None


class TestStadiumAndClub:
    """Stadiums and clubs use strict then alias"""

    def test_stadium(self, resolver):
        assert resolver.resolve_stadium_id_fuzzy("阪神甲子園球場") == 100
        assert resolver.resolve_stadium_id_fuzzy("甲子園") == 100
        assert resolver.resolve_stadium_id_fuzzy("甲子園 ") == 100
        assert resolver.resolve_stadium_id_fuzzy("神宮") is None

    def test_club(self, resolver):
        assert resolver.resolve_club_id_fuzzy("阪神") == 10
        assert resolver.resolve_club_id_fuzzy("タイガース") == 10
        assert resolver.resolve_club_id_fuzzy("カープ") is None


class TestResolvedName:
    """Tests for the ResolvedName helpers"""

    def test_resolve_team(self, resolver):
        resolved = resolver.resolve_team("阪神", "First")
        assert resolved.is_resolved
        assert resolved.ref_id == 1
        assert resolved.canonical_name == "阪神タイガース"
        assert resolved.raw_name == "阪神"

    def test_unresolved(self, resolver):
        resolved = resolver.resolve_stadium("神宮")
        assert not resolved.is_resolved
        assert resolved.canonical_name is None

    def test_resolve_club(self, resolver):
        assert resolver.resolve_club("ジャイアンツ").canonical_name == "読売"
