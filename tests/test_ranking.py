"""
Tests for candidate scoring and ranking.

Tests cover:
- Weighted linear policy (default weights and custom weights)
- Keyword-frequency policy
- Stable descending sort
- Timestamp parsing and recency
- Data integrity failures
"""
import math
from collections import Counter
from types import SimpleNamespace

import pytest

from social_feed.errors import DataIntegrityError
from social_feed.feed.profile import InterestProfile, profile_from_contents
from social_feed.feed.ranking import (
    Candidate,
    KeywordFrequencyPolicy,
    ScoringPolicy,
    WeightedLinearPolicy,
    make_candidate,
    matches_interests,
    parse_timestamp,
    policy_from_settings,
    rank,
    recency_days,
)

from tests.conftest import NOW, days_ago, make_settings


def candidate(id="1", content="Post content 1", comments=0, recency=0.0, user_id="u"):
    return Candidate(
        id=id,
        user_id=user_id,
        content=content,
        created_at=NOW.isoformat(),
        comments_count=comments,
        recency_score=recency,
    )


# Weighted linear policy

def test_weighted_linear_score_matching_post():
    profile = InterestProfile(pattern="Post content")
    policy = WeightedLinearPolicy()

    c = candidate(content="Post content 7", comments=2, recency=1.0)
    assert policy.relevance(c, profile) == 1.5
    assert policy.score(c, profile) == pytest.approx(2 * 1.2 + 1.0 * 0.8 + 1.5)


def test_weighted_linear_score_non_matching_post():
    profile = InterestProfile(pattern="rust")
    policy = WeightedLinearPolicy()

    c = candidate(content="Python all the way", comments=1, recency=0.5)
    assert policy.relevance(c, profile) == 1.0
    assert policy.score(c, profile) == pytest.approx(1.2 + 0.4 + 1.0)


def test_empty_pattern_matches_every_post():
    profile = InterestProfile()
    assert matches_interests("anything at all", profile)
    assert WeightedLinearPolicy().relevance(candidate(content="x"), profile) == 1.5


def test_pattern_match_is_case_sensitive():
    profile = InterestProfile(pattern="Post content")
    assert not matches_interests("post content 1", profile)


def test_custom_weights():
    policy = WeightedLinearPolicy(
        comments_weight=10.0, recency_weight=0.0, match_relevance=3.0, miss_relevance=0.0
    )
    profile = InterestProfile(pattern="hello")

    assert policy.score(candidate(content="hello", comments=1, recency=5.0), profile) == 13.0
    assert policy.score(candidate(content="bye", comments=0, recency=5.0), profile) == 0.0


# Keyword-frequency policy

def test_keyword_frequency_score():
    profile = profile_from_contents(["Post content 0", "Post content 1"])
    policy = KeywordFrequencyPolicy()

    # post=2, content=2, 0=1 → 5; + 1 comment * 2 → 7; recency 1 day halves it
    c = candidate(content="Post content 0", comments=1, recency=1.0)
    assert policy.relevance(c, profile) == 5.0
    assert policy.score(c, profile) == pytest.approx(3.5)


def test_keyword_frequency_ignores_case():
    profile = InterestProfile(pattern="Rust", weights=Counter({"rust": 3}))
    c = candidate(content="RUST rust", recency=0.0)
    assert KeywordFrequencyPolicy().score(c, profile) == 6.0


def test_policy_from_settings():
    default = policy_from_settings(make_settings())
    assert isinstance(default, WeightedLinearPolicy)
    assert default.comments_weight == 1.2
    assert default.recency_weight == 0.8

    tuned = policy_from_settings(make_settings(score_comments_weight=3.0))
    assert tuned.comments_weight == 3.0

    keyword = policy_from_settings(
        make_settings(scoring_policy="keyword_frequency", keyword_comments_weight=4.0)
    )
    assert isinstance(keyword, KeywordFrequencyPolicy)
    assert keyword.comments_weight == 4.0


def test_incomplete_policy_cannot_be_instantiated():
    class RelevanceOnly(ScoringPolicy):
        name = "relevance_only"

        def relevance(self, candidate, profile):
            return 1.0

    with pytest.raises(TypeError):
        RelevanceOnly()
    with pytest.raises(TypeError):
        ScoringPolicy()


# Ranking

def test_rank_sorts_by_score_descending():
    profile = InterestProfile()
    candidates = [
        candidate(id="a", comments=0),
        candidate(id="b", comments=5),
        candidate(id="c", comments=2),
    ]

    ranked = rank(candidates, profile, WeightedLinearPolicy())

    assert [e.candidate.id for e in ranked] == ["b", "c", "a"]
    scores = [e.score for e in ranked]
    assert scores == sorted(scores, reverse=True)


def test_rank_is_stable_for_equal_scores():
    profile = InterestProfile()
    candidates = [
        candidate(id="3", comments=1),
        candidate(id="1", comments=1),
        candidate(id="9", comments=4),
        candidate(id="2", comments=1),
    ]

    ranked = rank(candidates, profile, WeightedLinearPolicy())

    assert [e.candidate.id for e in ranked] == ["9", "3", "1", "2"]


def test_rank_empty():
    assert rank([], InterestProfile(), WeightedLinearPolicy()) == []


def test_rank_rejects_non_finite_scores():
    bad = candidate(recency=float("nan"))
    with pytest.raises(DataIntegrityError):
        rank([bad], InterestProfile(), WeightedLinearPolicy())


# Timestamps and recency

def test_parse_timestamp_accepts_z_suffix_and_naive_values():
    assert parse_timestamp("2024-06-01T12:00:00.000Z") == NOW
    assert parse_timestamp("2024-06-01T12:00:00") == NOW


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(DataIntegrityError):
        parse_timestamp("yesterday-ish")


def test_recency_days():
    assert recency_days(days_ago(1.5), NOW) == pytest.approx(1.5)
    assert recency_days(NOW.isoformat(), NOW) == 0.0


def test_recency_days_never_negative():
    assert recency_days(days_ago(-2), NOW) == 0.0


def test_make_candidate():
    post = SimpleNamespace(id="7", user_id="3", content="hi", created_at=days_ago(0.25))
    c = make_candidate(post, 4, NOW)
    assert c.comments_count == 4
    assert c.recency_score == pytest.approx(0.25)
    assert not math.isnan(c.recency_score)


def test_make_candidate_malformed_timestamp_names_the_post():
    post = SimpleNamespace(id="7", user_id="3", content="hi", created_at="not a date")
    with pytest.raises(DataIntegrityError) as excinfo:
        make_candidate(post, 0, NOW)
    assert "post 7" in excinfo.value.details
