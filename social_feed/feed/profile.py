"""
Interest profile: what a user has engaged with, as keywords.

The profile is built from the distinct contents of every post the user wrote
or commented on. It serves two purposes downstream:

  pattern  — the contents joined by single spaces; candidate posts must
             contain it as a substring (empty pattern = no restriction)
  weights  — keyword → occurrence count across that joined text, used by the
             keyword-frequency scoring policy
"""
from collections import Counter
from dataclasses import dataclass, field

from social_feed.store import FeedStore


@dataclass(frozen=True)
class InterestProfile:
    pattern: str = ""
    weights: Counter = field(default_factory=Counter)

    @property
    def is_empty(self) -> bool:
        return not self.pattern


def tokenize(text: str) -> list[str]:
    """Whitespace-separated, lower-cased tokens; empty tokens are dropped."""
    return [t.lower() for t in text.split()]


def profile_from_contents(contents: list[str]) -> InterestProfile:
    pattern = " ".join(contents)
    return InterestProfile(pattern=pattern, weights=Counter(tokenize(pattern)))


async def build_profile(store: FeedStore, user_id: str) -> InterestProfile:
    """Unknown users have no interactions and get an empty profile."""
    contents = await store.fetch_interaction_contents(user_id)
    return profile_from_contents(contents)
