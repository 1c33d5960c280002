"""
Tests for the store adapter: writes, the candidate query and error mapping.
"""
import pytest
from sqlalchemy import text

from social_feed.errors import ConflictError, NotFoundError, StoreError
from social_feed.store import FeedStore

from tests.conftest import days_ago


@pytest.fixture
async def store(session):
    store = FeedStore(session)
    await store.create_user("1", "User1")
    await store.create_user("2", "User2")
    return store


async def test_create_and_get_user(store):
    user = await store.get_user("1")
    assert user.name == "User1"


async def test_get_unknown_user(store):
    with pytest.raises(NotFoundError) as excinfo:
        await store.get_user("404")
    assert excinfo.value.message == "User not found"


async def test_duplicate_user_is_rejected_and_original_kept(store):
    with pytest.raises(ConflictError):
        await store.create_user("1", "Impostor")
    assert (await store.get_user("1")).name == "User1"


async def test_create_post_requires_existing_author(store):
    with pytest.raises(NotFoundError) as excinfo:
        await store.create_post("p", "999", "hello")
    assert excinfo.value.message == "User not found"


async def test_duplicate_post_is_rejected(store):
    await store.create_post("p", "1", "hello")
    with pytest.raises(ConflictError):
        await store.create_post("p", "2", "other")


async def test_create_post_stamps_created_at(store):
    post = await store.create_post("p", "1", "hello")
    assert post.created_at.endswith("+00:00")


async def test_get_post_with_comments(store):
    await store.create_post("p", "1", "hello")
    await store.create_comment("c2", "p", "2", "second")
    await store.create_comment("c1", "p", "1", "first")
    await store.create_comment("c3", "other", "1", "elsewhere")

    post, comments = await store.get_post_with_comments("p")

    assert post.content == "hello"
    assert [c.id for c in comments] == ["c1", "c2"]


async def test_get_missing_post(store):
    with pytest.raises(NotFoundError) as excinfo:
        await store.get_post_with_comments("999")
    assert excinfo.value.message == "Post not found"


async def test_duplicate_comment_is_rejected(store):
    await store.create_comment("c", "p", "1", "hi")
    with pytest.raises(ConflictError):
        await store.create_comment("c", "p", "1", "hi again")


# Candidate query

async def _posts(store, contents):
    for post_id, content in contents.items():
        await store.create_post(post_id, "1", content, days_ago(1))


async def test_empty_pattern_matches_all_posts(store):
    await _posts(store, {"a": "one", "b": "two", "c": "three"})

    rows = await store.fetch_candidates("", "", 20)

    assert [post.id for post, _ in rows] == ["a", "b", "c"]


async def test_candidates_respect_cursor_and_limit(store):
    await _posts(store, {"a": "x", "b": "x", "c": "x", "d": "x"})

    rows = await store.fetch_candidates("", "a", 2)

    assert [post.id for post, _ in rows] == ["b", "c"]


async def test_cursor_uses_string_order(store):
    await _posts(store, {"1": "x", "10": "x", "2": "x", "9": "x"})

    rows = await store.fetch_candidates("", "10", 20)

    assert [post.id for post, _ in rows] == ["2", "9"]


async def test_pattern_is_case_sensitive_substring(store):
    await _posts(store, {
        "a": "Post content 0",
        "b": "post content 0",
        "c": "prefix Post content 0 suffix",
        "d": "Post content 1",
    })

    rows = await store.fetch_candidates("Post content 0", "", 20)

    assert [post.id for post, _ in rows] == ["a", "c"]


async def test_pattern_wildcards_are_literal(store):
    await _posts(store, {"a": "100% sure", "b": "1000 reasons", "c": "a_b", "d": "axb"})

    assert [p.id for p, _ in await store.fetch_candidates("100%", "", 20)] == ["a"]
    assert [p.id for p, _ in await store.fetch_candidates("a_b", "", 20)] == ["c"]


async def test_candidates_carry_comment_counts(store):
    await _posts(store, {"a": "x", "b": "x"})
    for i in range(3):
        await store.create_comment(f"c{i}", "a", "2", "hi")

    rows = await store.fetch_candidates("", "", 20)

    assert [(post.id, count) for post, count in rows] == [("a", 3), ("b", 0)]


async def test_store_failure_is_mapped_to_store_error(store, session):
    await session.execute(text("DROP TABLE comment"))

    with pytest.raises(StoreError) as excinfo:
        await store.fetch_candidates("", "", 20)

    assert excinfo.value.message == "Failed to fetch feed"
    assert "comment" in excinfo.value.details
