"""Tests for match resolution — tiers, exclusivity and ordering."""

import random

import pytest

from app.matching_engine.config import MatchTier
from app.matching_engine.matcher import resolve_matches, unmatched_voters
from app.matching_engine.records import PreferenceRecord


# ── Helpers ────────────────────────────────────────────────────────────────

def _p(voter: str, first=None, second=None, third=None) -> PreferenceRecord:
    """Shorthand to build a preference record."""
    return PreferenceRecord(
        event_id="evt-1", voter_id=voter, first=first, second=second, third=third,
    )


def _pairs(matches) -> list[tuple[str, str, int]]:
    return [(m.user_a, m.user_b, m.score) for m in matches]


# ===========================================================================
# TIERS
# ===========================================================================


class TestMutualFirst:

    def test_mutual_first_choice_pairs_with_score_10(self):
        matches = resolve_matches([_p("A", first="B"), _p("B", first="A")])
        assert _pairs(matches) == [("A", "B", 10)]
        assert matches[0].tier == MatchTier.MUTUAL_FIRST

    def test_one_sided_first_choice_does_not_pair(self):
        matches = resolve_matches([_p("A", first="B"), _p("B", first="C")])
        assert matches == []

    def test_three_cycle_without_lower_reciprocity_pairs_nobody(self):
        """A→B, B→C, C→A: no mutual firsts and no fallback."""
        prefs = [_p("A", first="B"), _p("B", first="C"), _p("C", first="A")]
        assert resolve_matches(prefs) == []

    def test_three_cycle_with_full_rankings_still_needs_reciprocity(self):
        prefs = [
            _p("A", first="B", second="X"),
            _p("B", first="C", second="Y"),
            _p("C", first="A", second="Z"),
        ]
        assert resolve_matches(prefs) == []


class TestSecondReciprocal:

    def test_second_choice_reciprocated_as_first(self):
        prefs = [_p("A", first="X", second="B"), _p("B", first="A")]
        matches = resolve_matches(prefs)
        assert _pairs(matches) == [("A", "B", 7)]
        assert matches[0].tier == MatchTier.SECOND_RECIPROCAL

    def test_second_choice_reciprocated_as_second(self):
        prefs = [
            _p("A", first="X", second="B"),
            _p("B", first="Y", second="A"),
        ]
        assert _pairs(resolve_matches(prefs)) == [("A", "B", 7)]

    def test_counterpart_third_slot_is_not_enough_for_second_tier(self):
        """A names B second, B names A only third: falls to B's third-tier check."""
        prefs = [_p("A", second="B"), _p("B", third="A")]
        matches = resolve_matches(prefs)
        assert _pairs(matches) == [("B", "A", 5)]
        assert matches[0].tier == MatchTier.THIRD_RECIPROCAL


class TestThirdReciprocal:

    def test_third_choice_reciprocated_anywhere(self):
        for slot in ("first", "second", "third"):
            prefs = [_p("A", third="B"), _p("B", **{slot: "A"})]
            matches = resolve_matches(prefs)
            assert _pairs(matches) == [("A", "B", 5)], slot

    def test_stronger_tier_wins_for_the_same_voter(self):
        prefs = [
            _p("A", first="B", second="C"),
            _p("B", first="A"),
            _p("C", first="A"),
        ]
        matches = resolve_matches(prefs)
        assert _pairs(matches) == [("A", "B", 10)]


# ===========================================================================
# EDGE CASES
# ===========================================================================


class TestEdgeCases:

    def test_empty_input(self):
        assert resolve_matches([]) == []

    def test_self_reference_is_ignored(self):
        assert resolve_matches([_p("A", first="A", second="A", third="A")]) == []

    def test_reference_to_voter_without_record_contributes_nothing(self):
        prefs = [_p("A", first="GHOST", second="B"), _p("B", second="A")]
        assert _pairs(resolve_matches(prefs)) == [("A", "B", 7)]

    def test_all_empty_slots(self):
        assert resolve_matches([_p("A"), _p("B")]) == []

    def test_first_record_of_repeated_voter_wins(self):
        prefs = [
            _p("A", first="GHOST"),
            _p("A", first="C"),
            _p("C", first="A"),
        ]
        assert resolve_matches(prefs) == []

    def test_repeated_voter_is_matched_at_most_once(self):
        prefs = [
            _p("A", first="B"),
            _p("A", first="C"),
            _p("B", first="A"),
            _p("C", first="A"),
        ]
        assert _pairs(resolve_matches(prefs)) == [("A", "B", 10)]

    def test_resolution_depends_on_input_order(self):
        a = _p("A", first="B")
        b = _p("B", first="A", second="C")
        c = _p("C", second="B")

        assert _pairs(resolve_matches([a, b, c])) == [("A", "B", 10)]
        assert _pairs(resolve_matches([c, a, b])) == [("C", "B", 7)]

    def test_pairs_carry_event_id(self):
        matches = resolve_matches([_p("A", first="B"), _p("B", first="A")])
        assert matches[0].event_id == "evt-1"
        assert matches[0].members == frozenset({"A", "B"})


# ===========================================================================
# EXCLUSIVITY
# ===========================================================================


class TestExclusivity:

    def test_matched_counterpart_is_not_reused(self):
        prefs = [
            _p("A", first="B"),
            _p("B", first="A", second="C"),
            _p("C", first="B"),
        ]
        assert _pairs(resolve_matches(prefs)) == [("A", "B", 10)]

    @pytest.mark.parametrize("seed", range(25))
    def test_no_participant_in_two_pairs(self, seed):
        rng = random.Random(seed)
        people = [f"u{i}" for i in range(12)]
        prefs = []
        for voter in people:
            slots = [rng.choice(people + [None]) for _ in range(3)]
            prefs.append(_p(voter, *slots))
        rng.shuffle(prefs)

        seen: set[str] = set()
        for match in resolve_matches(prefs):
            assert match.user_a != match.user_b
            assert not (match.members & seen)
            seen |= match.members


# ===========================================================================
# SCENARIO
# ===========================================================================


class TestFourParticipantScenario:
    """{A, C} vs {B, D}: A=[B, D], B=[A], C=[D, B], D=[C, B]."""

    @pytest.fixture
    def prefs(self):
        return [
            _p("A", first="B", second="D"),
            _p("B", first="A"),
            _p("C", first="D", second="B"),
            _p("D", first="C", second="B"),
        ]

    def test_two_mutual_first_pairs(self, prefs):
        matches = resolve_matches(prefs)
        assert _pairs(matches) == [("A", "B", 10), ("C", "D", 10)]
        assert all(m.tier == MatchTier.MUTUAL_FIRST for m in matches)

    def test_everyone_matched(self, prefs):
        assert unmatched_voters(prefs, resolve_matches(prefs)) == []


class TestUnmatchedVoters:

    def test_lists_unpaired_voters_once_in_input_order(self):
        prefs = [
            _p("Z", first="Q"),
            _p("A", first="B"),
            _p("B", first="A"),
            _p("Z", first="A"),
            _p("Y"),
        ]
        assert unmatched_voters(prefs, resolve_matches(prefs)) == ["Z", "Y"]
