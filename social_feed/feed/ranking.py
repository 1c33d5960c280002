"""
Candidate scoring and ranking.

Scores are computed here in plain Python rather than inside the candidate
query, so every policy can be unit-tested without a database.

Default policy (weighted linear combination):
  relevance = 1.5 if the post contains the user's interaction pattern else 1.0
  score     = 1.2 * comments_count
            + 0.8 * recency_score          (age in fractional days)
            + relevance

Keyword-frequency policy:
  score  = Σ interest weight of each word in the post
         + 2 * comments_count
  score *= 1 / (1 + recency_score)

Weights are configuration (see Settings.score_*). Ranking is a stable sort
on score, descending: equal scores keep their candidate order, which keeps
pagination deterministic.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone

from social_feed.config import Settings
from social_feed.errors import DataIntegrityError
from social_feed.feed.profile import InterestProfile, tokenize

SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class Candidate:
    """A post eligible for the feed, annotated with ranking signals."""
    id: str
    user_id: str
    content: str
    created_at: str
    comments_count: int
    recency_score: float


@dataclass(frozen=True)
class RankedEntry:
    candidate: Candidate
    relevance_score: float
    score: float


# ─────────────────────────── Candidate signals ────────────────────────────

def parse_timestamp(value: str) -> datetime:
    """ISO-8601 → aware datetime. Naive values are taken as UTC."""
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, TypeError, ValueError) as exc:
        raise DataIntegrityError("Malformed post timestamp", f"created_at={value!r}") from exc
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def recency_days(created_at: str, now: datetime) -> float:
    age = (now - parse_timestamp(created_at)).total_seconds() / SECONDS_PER_DAY
    return max(0.0, age)


def make_candidate(post, comments_count: int, now: datetime) -> Candidate:
    try:
        recency = recency_days(post.created_at, now)
    except DataIntegrityError as exc:
        exc.details = f"post {post.id}: {exc.details}"
        raise
    return Candidate(
        id=post.id,
        user_id=post.user_id,
        content=post.content,
        created_at=post.created_at,
        comments_count=comments_count,
        recency_score=recency,
    )


def matches_interests(content: str, profile: InterestProfile) -> bool:
    # An empty pattern matches everything, like LIKE '%%'
    return profile.pattern in content


# ─────────────────────────── Scoring policies ─────────────────────────────

class ScoringPolicy(ABC):
    name = "base"

    @abstractmethod
    def relevance(self, candidate: Candidate, profile: InterestProfile) -> float:
        ...

    @abstractmethod
    def score(self, candidate: Candidate, profile: InterestProfile) -> float:
        ...


@dataclass(frozen=True)
class WeightedLinearPolicy(ScoringPolicy):
    comments_weight: float = 1.2
    recency_weight: float = 0.8
    match_relevance: float = 1.5
    miss_relevance: float = 1.0

    name = "weighted_linear"

    def relevance(self, candidate: Candidate, profile: InterestProfile) -> float:
        if matches_interests(candidate.content, profile):
            return self.match_relevance
        return self.miss_relevance

    def score(self, candidate: Candidate, profile: InterestProfile) -> float:
        return (
            candidate.comments_count * self.comments_weight
            + candidate.recency_score * self.recency_weight
            + self.relevance(candidate, profile)
        )


@dataclass(frozen=True)
class KeywordFrequencyPolicy(ScoringPolicy):
    comments_weight: float = 2.0

    name = "keyword_frequency"

    def relevance(self, candidate: Candidate, profile: InterestProfile) -> float:
        return float(sum(profile.weights.get(word, 0) for word in tokenize(candidate.content)))

    def score(self, candidate: Candidate, profile: InterestProfile) -> float:
        raw = self.relevance(candidate, profile) + candidate.comments_count * self.comments_weight
        return raw * (1.0 / (1.0 + candidate.recency_score))


def policy_from_settings(settings: Settings) -> ScoringPolicy:
    if settings.scoring_policy == "keyword_frequency":
        return KeywordFrequencyPolicy(comments_weight=settings.keyword_comments_weight)
    return WeightedLinearPolicy(
        comments_weight=settings.score_comments_weight,
        recency_weight=settings.score_recency_weight,
        match_relevance=settings.score_match_relevance,
        miss_relevance=settings.score_miss_relevance,
    )


# ─────────────────────────── Ranking ──────────────────────────────────────

def rank(
    candidates: list[Candidate], profile: InterestProfile, policy: ScoringPolicy
) -> list[RankedEntry]:
    """Score every candidate and sort by score, descending (stable)."""
    entries: list[RankedEntry] = []
    for candidate in candidates:
        score = policy.score(candidate, profile)
        if not math.isfinite(score):
            raise DataIntegrityError(
                "Failed to score post", f"post {candidate.id} scored {score!r}"
            )
        entries.append(
            RankedEntry(
                candidate=candidate,
                relevance_score=policy.relevance(candidate, profile),
                score=score,
            )
        )
    # sorted() is stable, including with reverse=True
    return sorted(entries, key=lambda e: e.score, reverse=True)
