"""
Chat Aggregation Tests
"""

import pytest

from conftest import FakeDirectory, make_chat
from matchchats.core.errors import (
    ChatListUnavailableError,
    DirectoryNetworkError,
    DirectoryNotFoundError,
)
from matchchats.schemas.chat import Match, UserProfile
from matchchats.services.aggregation import ChatAggregator
from matchchats.services.match_resolver import MatchResolver
from matchchats.services.presentation import build_rows


@pytest.mark.asyncio
async def test_one_resolution_per_chat_and_one_row_per_chat(multi_directory):
    result = await ChatAggregator(multi_directory).aggregate(7)

    assert multi_directory.count("match") == 4
    assert len(result.chats) == 4
    rows = build_rows(result.chats, result.counterpart_by_match, result.unresolved)
    assert [r.chat_id for r in rows] == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_partial_failures_are_contained(multi_directory):
    result = await ChatAggregator(multi_directory).aggregate(7)

    assert set(result.counterpart_by_match) == {100, 300}
    assert result.counterpart_by_match[300].first_name == "Bo"
    assert result.unresolved == frozenset({200, 400})


@pytest.mark.asyncio
async def test_chat_list_fetch_happens_before_resolution(multi_directory):
    await ChatAggregator(multi_directory).aggregate(7)

    assert multi_directory.calls[0] == ("chats", 7)


@pytest.mark.asyncio
async def test_resolutions_run_concurrently():
    chats = [make_chat(i, 100 + i) for i in range(5)]
    directory = FakeDirectory(
        chats={7: chats},
        delays={("match", 100 + i): 0.02 for i in range(5)},
    )

    await ChatAggregator(directory).aggregate(7)

    assert directory.max_in_flight == 5


@pytest.mark.asyncio
async def test_max_concurrency_bounds_in_flight_resolutions():
    chats = [make_chat(i, 100 + i) for i in range(6)]
    directory = FakeDirectory(
        chats={7: chats},
        delays={("match", 100 + i): 0.01 for i in range(6)},
    )

    result = await ChatAggregator(directory, max_concurrency=2).aggregate(7)

    assert directory.max_in_flight <= 2
    assert directory.count("match") == 6
    assert len(result.chats) == 6


@pytest.mark.asyncio
async def test_out_of_order_completion_keeps_fetch_order():
    # First chat finishes last
    directory = FakeDirectory(
        chats={7: [make_chat(1, 10), make_chat(2, 20), make_chat(3, 30)]},
        matches={
            10: Match(match_id=10, user1_id=7, user2_id=1),
            20: Match(match_id=20, user1_id=7, user2_id=2),
            30: Match(match_id=30, user1_id=7, user2_id=3),
        },
        users={
            1: UserProfile(user_id=1, first_name="A", last_name="One"),
            2: UserProfile(user_id=2, first_name="B", last_name="Two"),
            3: UserProfile(user_id=3, first_name="C", last_name="Three"),
        },
        delays={("match", 10): 0.05, ("match", 20): 0.02, ("match", 30): 0.0},
    )

    result = await ChatAggregator(directory).aggregate(7)
    rows = build_rows(result.chats, result.counterpart_by_match, result.unresolved)

    assert [r.chat_id for r in rows] == [1, 2, 3]
    assert [r.display_name for r in rows] == ["A One", "B Two", "C Three"]


@pytest.mark.asyncio
async def test_aggregation_is_idempotent(multi_directory):
    aggregator = ChatAggregator(multi_directory)

    first = await aggregator.aggregate(7)
    second = await aggregator.aggregate(7)

    assert first.chats == second.chats
    assert dict(first.counterpart_by_match) == dict(second.counterpart_by_match)
    assert first.unresolved == second.unresolved


@pytest.mark.asyncio
async def test_no_chats_is_empty_not_error():
    directory = FakeDirectory(chats={7: []})

    result = await ChatAggregator(directory).aggregate(7)

    assert result.is_empty
    assert dict(result.counterpart_by_match) == {}
    assert directory.count("match") == 0


@pytest.mark.asyncio
async def test_chat_list_failure_is_fatal():
    directory = FakeDirectory()
    directory.chat_list_error = DirectoryNetworkError("connection refused")

    with pytest.raises(ChatListUnavailableError) as exc_info:
        await ChatAggregator(directory).aggregate(7)

    assert exc_info.value.user_id == 7
    assert exc_info.value.status_code == 502
    assert isinstance(exc_info.value.cause, DirectoryNetworkError)


@pytest.mark.asyncio
async def test_chat_list_not_found_maps_to_404():
    directory = FakeDirectory()
    directory.chat_list_error = DirectoryNotFoundError("no such user")

    with pytest.raises(ChatListUnavailableError) as exc_info:
        await ChatAggregator(directory).aggregate(7)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_counterpart_map_is_read_only(ana_directory):
    result = await ChatAggregator(ana_directory).aggregate(7)

    with pytest.raises(TypeError):
        result.counterpart_by_match[999] = None


@pytest.mark.asyncio
async def test_chats_sharing_a_match_share_one_entry():
    directory = FakeDirectory(
        chats={7: [make_chat(1, 100, "a"), make_chat(2, 100, "b")]},
        matches={100: Match(match_id=100, user1_id=7, user2_id=9)},
        users={9: UserProfile(user_id=9, first_name="Ana", last_name="Lee")},
    )

    result = await ChatAggregator(directory).aggregate(7)
    rows = build_rows(result.chats, result.counterpart_by_match, result.unresolved)

    assert list(result.counterpart_by_match) == [100]
    assert len(rows) == 2
    assert rows[0].counterpart == rows[1].counterpart


@pytest.mark.asyncio
async def test_resolver_that_raises_still_yields_a_row(ana_directory):
    class BrokenResolver(MatchResolver):
        async def resolve_outcome(self, match_id, requesting_user_id):
            raise RuntimeError("bug")

    result = await ChatAggregator(ana_directory, resolver=BrokenResolver(ana_directory)).aggregate(7)

    assert len(result.chats) == 1
    assert result.unresolved == frozenset({100})
