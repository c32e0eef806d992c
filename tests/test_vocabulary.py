"""Tests for familygraph/vocabulary.py: kinds, categories, reciprocal lookup."""
import pytest

from familygraph.vocabulary import (
    Category,
    Gender,
    NodeGroup,
    RelationKind,
    RECIPROCALS,
    category_of,
    group_of,
    implied_gender,
    reciprocal_of,
    relationship_types,
    resolve_reciprocal,
)

K = RelationKind
M, F, U = Gender.MALE, Gender.FEMALE, Gender.UNKNOWN


class TestParse:
    def test_case_and_whitespace(self):
        assert RelationKind.parse("  Mother ") is K.MOTHER

    def test_aliases(self):
        assert RelationKind.parse("teacher") is K.MENTOR
        assert RelationKind.parse("Community") is K.NEIGHBOR
        assert RelationKind.parse("CHILD_OF") is K.CHILD
        assert RelationKind.parse("partner") is K.SPOUSE

    def test_unknown(self):
        assert RelationKind.parse("pen pal") is None
        assert RelationKind.parse("") is None
        assert RelationKind.parse(None) is None

    def test_gender(self):
        assert Gender.parse("M") is M
        assert Gender.parse("female") is F
        assert Gender.parse(None) is U
        assert Gender.parse("x") is U


class TestCatalogue:
    def test_every_kind_has_entries(self):
        for kind in RelationKind:
            assert kind in RECIPROCALS
            assert isinstance(category_of(kind), Category)
            assert isinstance(group_of(kind), NodeGroup)

    def test_categories(self):
        assert category_of(K.FATHER) is Category.ANCESTOR
        assert category_of(K.SON) is Category.DESCENDANT
        assert category_of(K.BROTHER) is Category.LATERAL
        assert category_of(K.AUNT) is Category.ANCESTOR
        assert category_of(K.NIECE) is Category.DESCENDANT

    def test_groups(self):
        assert group_of(K.COUSIN) is NodeGroup.FAMILY
        assert group_of(K.FRIEND) is NodeGroup.FRIEND
        assert group_of(K.MENTOR) is NodeGroup.MENTOR
        assert group_of(K.NEIGHBOR) is NodeGroup.CULTURAL

    def test_picker_list(self):
        types = relationship_types()
        assert types[:4] == ["father", "mother", "son", "daughter"]
        assert "mentor" in types
        assert "other" in types
        assert "parent" not in types


class TestReciprocal:
    @pytest.mark.parametrize("kind,target,expected", [
        (K.FATHER, M, K.SON),
        (K.FATHER, F, K.DAUGHTER),
        (K.MOTHER, M, K.SON),
        (K.DAUGHTER, F, K.MOTHER),
        (K.SISTER, F, K.SISTER),
        (K.SISTER, M, K.BROTHER),
        (K.GRANDMOTHER, F, K.GRANDDAUGHTER),
        (K.NEPHEW, F, K.AUNT),
        (K.HUSBAND, F, K.WIFE),
        (K.MENTOR, M, K.MENTEE),
    ])
    def test_gendered(self, kind, target, expected):
        assert reciprocal_of(kind, target) is expected

    @pytest.mark.parametrize("kind", [K.COUSIN, K.FRIEND, K.NEIGHBOR, K.OTHER])
    def test_symmetric_kinds_ignore_gender(self, kind):
        for g in (M, F, U):
            rec = resolve_reciprocal(kind, g)
            assert rec.kind is kind
            assert rec.low_confidence is False

    def test_unknown_gender_falls_back_to_generic(self):
        rec = resolve_reciprocal(K.FATHER, U)
        assert rec.kind is K.CHILD
        assert rec.low_confidence is True
        assert reciprocal_of(K.UNCLE) is K.NIBLING

    def test_spouse_uses_asking_side(self):
        assert reciprocal_of(K.SPOUSE, U, M) is K.WIFE
        assert reciprocal_of(K.SPOUSE, U, F) is K.HUSBAND
        # husband implies a male source
        assert reciprocal_of(K.HUSBAND, U, U) is K.WIFE
        rec = resolve_reciprocal(K.SPOUSE, U, U)
        assert rec.kind is K.SPOUSE
        assert rec.low_confidence is True

    def test_target_gender_beats_source_gender(self):
        assert reciprocal_of(K.WIFE, F, F) is K.WIFE

    def test_deterministic(self):
        assert [reciprocal_of(K.AUNT, F) for _ in range(5)] == [K.NIECE] * 5


class TestRoundTrip:
    """reciprocal(reciprocal(k, g2, g1), g1, g2) == k whenever both sides are known."""

    GENDERED = [k for k in RelationKind if implied_gender(k) is not U]

    @pytest.mark.parametrize("kind", GENDERED)
    @pytest.mark.parametrize("g2", [M, F])
    def test_round_trip(self, kind, g2):
        g1 = implied_gender(kind)
        back = reciprocal_of(kind, g2, g1)
        assert reciprocal_of(back, g1, g2) is kind

    @pytest.mark.parametrize("kind", [K.COUSIN, K.FRIEND, K.NEIGHBOR, K.OTHER, K.MENTOR, K.MENTEE])
    def test_round_trip_ungendered(self, kind):
        assert reciprocal_of(reciprocal_of(kind, M, F), F, M) is kind
