"""Tests for the crawl frontier."""

import asyncio

import pytest

from siteaudit.frontier import Frontier

SEED = "https://example.com"


@pytest.mark.asyncio
async def test_fifo_and_dedup() -> None:
    frontier = Frontier(max_pages=10)
    frontier.claim_seed(SEED)

    added = await frontier.add_many([f"{SEED}/a", f"{SEED}/b", f"{SEED}/a", SEED])

    assert added == 2
    assert await frontier.next() == f"{SEED}/a"
    assert await frontier.next() == f"{SEED}/b"
    assert frontier.visited == {SEED, f"{SEED}/a", f"{SEED}/b"}


@pytest.mark.asyncio
async def test_add_single_url() -> None:
    frontier = Frontier(max_pages=5)
    assert await frontier.add(f"{SEED}/a") is True
    assert await frontier.add(f"{SEED}/a") is False
    assert frontier.pending == 1


@pytest.mark.asyncio
async def test_cap_counts_seed() -> None:
    frontier = Frontier(max_pages=2)
    frontier.claim_seed(SEED)
    await frontier.add_many([f"{SEED}/a", f"{SEED}/b"])

    assert await frontier.next() == f"{SEED}/a"
    assert await frontier.next() is None
    assert frontier.reached_cap
    assert frontier.pending == 1


@pytest.mark.asyncio
async def test_seed_always_claimed() -> None:
    frontier = Frontier(max_pages=1)
    frontier.claim_seed(SEED)
    await frontier.add(f"{SEED}/a")

    assert frontier.claimed == 1
    assert await frontier.next() is None


@pytest.mark.asyncio
async def test_empty_and_idle_returns_none() -> None:
    frontier = Frontier(max_pages=5)
    frontier.claim_seed(SEED)
    assert await frontier.next() is None


@pytest.mark.asyncio
async def test_waits_for_in_flight_work() -> None:
    """An idle worker waits while another may still discover links."""
    frontier = Frontier(max_pages=5)
    frontier.claim_seed(SEED)
    await frontier.add(f"{SEED}/a")
    first = await frontier.next()

    waiter = asyncio.create_task(frontier.next())
    await asyncio.sleep(0)
    assert not waiter.done()

    await frontier.complete(first, [f"{SEED}/b"])
    assert await asyncio.wait_for(waiter, timeout=1) == f"{SEED}/b"


@pytest.mark.asyncio
async def test_waiter_released_when_work_runs_out() -> None:
    frontier = Frontier(max_pages=5)
    frontier.claim_seed(SEED)
    await frontier.add(f"{SEED}/a")
    first = await frontier.next()

    waiter = asyncio.create_task(frontier.next())
    await asyncio.sleep(0)
    await frontier.complete(first)

    assert await asyncio.wait_for(waiter, timeout=1) is None


@pytest.mark.asyncio
async def test_skipped_url_returns_its_slot() -> None:
    frontier = Frontier(max_pages=2)
    frontier.claim_seed(SEED)
    await frontier.add_many([f"{SEED}/private", f"{SEED}/public"])

    skipped = await frontier.next()
    await frontier.complete(skipped, fetched=False)

    assert await frontier.next() == f"{SEED}/public"
    assert frontier.claimed == 2


@pytest.mark.asyncio
async def test_no_url_handed_out_twice() -> None:
    frontier = Frontier(max_pages=100)
    frontier.claim_seed(SEED)
    await frontier.add_many(f"{SEED}/p{i}" for i in range(50))
    handed_out: list[str] = []

    async def worker() -> None:
        while (url := await frontier.next()) is not None:
            handed_out.append(url)
            await asyncio.sleep(0)
            await frontier.complete(url)

    await asyncio.gather(*(worker() for _ in range(4)))

    assert len(handed_out) == 50
    assert len(set(handed_out)) == 50


@pytest.mark.asyncio
async def test_mark_visited_prevents_enqueue() -> None:
    frontier = Frontier(max_pages=5)
    frontier.mark_visited(f"{SEED}/redirected")
    assert await frontier.add(f"{SEED}/redirected") is False
    assert frontier.claimed == 0


@pytest.mark.asyncio
async def test_queued_url_visited_by_redirect_is_not_handed_out() -> None:
    frontier = Frontier(max_pages=5)
    frontier.claim_seed(SEED)
    await frontier.add_many([f"{SEED}/old", f"{SEED}/new", f"{SEED}/about"])

    assert await frontier.next() == f"{SEED}/old"
    frontier.mark_visited(f"{SEED}/new")
    await frontier.complete(f"{SEED}/old")

    assert await frontier.next() == f"{SEED}/about"
    assert frontier.claimed == 3
    assert frontier.pending == 0
