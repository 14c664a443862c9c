"""Tests for debounced, version-checked refreshes."""

import asyncio

import pytest

from color_indexer.cache import ResultCache
from color_indexer.colors.parser import parse_color
from color_indexer.document import TextDocument
from color_indexer.models import DetectionRecord, Position, Range
from color_indexer.scheduler import RefreshScheduler, RefreshStatus

URI = "file:///page.html"


def make_records(count: int) -> list[DetectionRecord]:
    color = parse_color("#000")
    return [
        DetectionRecord(
            range=Range(Position(line, 0), Position(line, 4)),
            original_text="#000",
            normalized_color=color.css_string,
            color=color,
        )
        for line in range(count)
    ]


class Consumer:
    """Records every apply() call."""

    def __init__(self):
        self.calls: list[tuple[str, int, int]] = []

    def __call__(self, uri, chunk, chunk_index):
        self.calls.append((uri, len(chunk), chunk_index))


class Compute:
    """Returns fixed records and counts calls."""

    def __init__(self, records):
        self.records = records
        self.calls = 0
        self.versions: list[int] = []

    async def __call__(self, document):
        self.calls += 1
        self.versions.append(document.version)
        return self.records


def make_scheduler(compute, apply, **kwargs):
    kwargs.setdefault("debounce_seconds", 0)
    return RefreshScheduler(ResultCache(), compute, apply, **kwargs)


class TestRefresh:
    """Tests for the happy path."""

    @pytest.mark.asyncio
    async def test_applies_records(self):
        """Test a refresh computes and hands over every record."""
        document = TextDocument(URI, "text")
        compute = Compute(make_records(3))
        consumer = Consumer()
        scheduler = make_scheduler(compute, consumer)

        outcome = await scheduler.refresh(document)

        assert outcome.status is RefreshStatus.APPLIED
        assert outcome.applied == 3
        assert outcome.version == 1
        assert consumer.calls == [(URI, 3, 0)]
        assert compute.versions == [1]

    @pytest.mark.asyncio
    async def test_applies_in_chunks(self):
        consumer = Consumer()
        scheduler = make_scheduler(Compute(make_records(5)), consumer, chunk_size=2)

        outcome = await scheduler.refresh(TextDocument(URI, "text"))

        assert [(size, index) for _, size, index in consumer.calls] == [(2, 0), (2, 1), (1, 2)]
        assert outcome.applied == 5

    @pytest.mark.asyncio
    async def test_empty_result_still_clears(self):
        """Test an empty result is delivered once so stale results get cleared."""
        consumer = Consumer()
        scheduler = make_scheduler(Compute([]), consumer)

        outcome = await scheduler.refresh(TextDocument(URI, "text"))

        assert outcome.status is RefreshStatus.APPLIED
        assert consumer.calls == [(URI, 0, 0)]

    @pytest.mark.asyncio
    async def test_async_apply(self):
        received = []

        async def apply(uri, chunk, chunk_index):
            await asyncio.sleep(0)
            received.extend(chunk)

        scheduler = make_scheduler(Compute(make_records(2)), apply)
        await scheduler.refresh(TextDocument(URI, "text"))

        assert len(received) == 2

    @pytest.mark.asyncio
    async def test_results_are_cached_per_version(self):
        document = TextDocument(URI, "text")
        compute = Compute(make_records(1))
        scheduler = make_scheduler(compute, Consumer())

        await scheduler.refresh(document)
        await scheduler.refresh(document)
        assert compute.calls == 1

        document.update("changed")
        await scheduler.refresh(document)
        assert compute.versions == [1, 2]

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            make_scheduler(Compute([]), Consumer(), chunk_size=0)


class TestAbandonedRefresh:
    """Tests for stale and superseded refreshes."""

    @pytest.mark.asyncio
    async def test_stale_after_compute(self):
        document = TextDocument(URI, "text")
        consumer = Consumer()

        async def compute(captured):
            document.update("typing")
            return make_records(1)

        scheduler = make_scheduler(compute, consumer)
        outcome = await scheduler.refresh(document)

        assert outcome.status is RefreshStatus.STALE
        assert consumer.calls == []

    @pytest.mark.asyncio
    async def test_compute_sees_captured_snapshot(self):
        document = TextDocument(URI, "before")
        seen = []

        async def compute(captured):
            document.update("after")
            seen.append((captured.version, captured.get_text()))
            return []

        await make_scheduler(compute, Consumer()).refresh(document)
        assert seen == [(1, "before")]

    @pytest.mark.asyncio
    async def test_stale_between_chunks(self):
        document = TextDocument(URI, "text")
        calls = []

        def apply(uri, chunk, chunk_index):
            calls.append(chunk_index)
            document.update("edited")

        scheduler = make_scheduler(Compute(make_records(5)), apply, chunk_size=2)
        outcome = await scheduler.refresh(document)

        assert outcome.status is RefreshStatus.STALE
        assert outcome.applied == 2
        assert calls == [0]

    @pytest.mark.asyncio
    async def test_debounce_keeps_only_latest(self):
        """Test rapid refreshes collapse into the last one."""
        document = TextDocument(URI, "text")
        compute = Compute(make_records(1))
        consumer = Consumer()
        scheduler = make_scheduler(compute, consumer, debounce_seconds=0.01)

        first, second = await asyncio.gather(
            scheduler.refresh(document), scheduler.refresh(document)
        )

        assert first.status is RefreshStatus.SUPERSEDED
        assert second.status is RefreshStatus.APPLIED
        assert compute.calls == 1
        assert len(consumer.calls) == 1

    @pytest.mark.asyncio
    async def test_cancel(self):
        document = TextDocument(URI, "text")
        consumer = Consumer()
        scheduler = make_scheduler(
            Compute(make_records(1)), consumer, debounce_seconds=0.01
        )

        task = asyncio.create_task(scheduler.refresh(document))
        await asyncio.sleep(0)
        scheduler.cancel(URI)

        outcome = await task
        assert outcome.status is RefreshStatus.SUPERSEDED
        assert consumer.calls == []

    @pytest.mark.asyncio
    async def test_documents_refresh_independently(self):
        consumer = Consumer()
        scheduler = make_scheduler(
            Compute(make_records(1)), consumer, debounce_seconds=0.01
        )

        outcomes = await asyncio.gather(
            scheduler.refresh(TextDocument("file:///a.html", "a")),
            scheduler.refresh(TextDocument("file:///b.html", "b")),
        )

        assert [o.status for o in outcomes] == [RefreshStatus.APPLIED] * 2


class TestSchedulerState:
    """Tests for eligibility, cleanup and statistics."""

    @pytest.mark.asyncio
    async def test_skipped_document(self):
        compute = Compute(make_records(1))
        scheduler = make_scheduler(compute, Consumer(), should_refresh=lambda d: False)

        outcome = await scheduler.refresh(TextDocument(URI, "text"))

        assert outcome.status is RefreshStatus.SKIPPED
        assert compute.calls == 0

    @pytest.mark.asyncio
    async def test_forget_drops_cached_results(self):
        scheduler = make_scheduler(Compute(make_records(1)), Consumer())
        await scheduler.refresh(TextDocument(URI, "text"))
        assert URI in scheduler.cache

        scheduler.forget(URI)
        assert URI not in scheduler.cache
        assert scheduler.get_stats()["documents"] == 0

    @pytest.mark.asyncio
    async def test_forget_abandons_running_refresh(self):
        """Test a refresh from before a close never applies after a reopen."""
        consumer = Consumer()
        scheduler = make_scheduler(
            Compute(make_records(1)), consumer, debounce_seconds=0.01
        )
        closed = asyncio.create_task(scheduler.refresh(TextDocument(URI, "old")))
        await asyncio.sleep(0)

        scheduler.forget(URI)
        reopened = asyncio.create_task(scheduler.refresh(TextDocument(URI, "new")))

        first, second = await asyncio.gather(closed, reopened)
        assert first.status is RefreshStatus.SUPERSEDED
        assert second.status is RefreshStatus.APPLIED
        assert len(consumer.calls) == 1

    @pytest.mark.asyncio
    async def test_stats(self):
        document = TextDocument(URI, "text")
        scheduler = make_scheduler(Compute(make_records(1)), Consumer())
        await scheduler.refresh(document)

        skipping = make_scheduler(Compute([]), Consumer(), should_refresh=lambda d: False)
        await skipping.refresh(document)

        assert scheduler.get_stats()["applied"] == 1
        assert scheduler.get_stats()["documents"] == 1
        assert skipping.get_stats()["skipped"] == 1
        assert skipping.get_stats()["documents"] == 0
