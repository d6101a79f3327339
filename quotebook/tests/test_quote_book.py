import asyncio

import pytest

from quotebook.domain.quote import QuoteCandidate
from quotebook.errors import NetworkError, StorageFault
from quotebook.services.notice_svc import QUOTE_DELETED, QUOTE_SAVED
from quotebook.services.quote_book import QuoteBook
from quotebook.services.quote_store import QuoteStore


class FailingInsertStore(QuoteStore):
    def insert(self, quote_text, author_name):
        raise StorageFault("insert_failed: disk I/O error")


def _pairs(records):
    return [(r.quote_text, r.author_name) for r in records]


def test_initialize_loads_projection(book, store):
    store.insert("already", "there")
    asyncio.run(book.initialize())
    assert _pairs(book.projection) == [("already", "there")]


def test_save_remote_quote(book, provider, store):
    provider.quotes = [("Be yourself.", "Oscar Wilde")]

    async def run():
        await book.initialize()
        await book.fetch_random_quote()
        await book.save_candidate()

    asyncio.run(run())
    assert _pairs(store.scan_all()) == [("Be yourself.", "Oscar Wilde")]
    assert _pairs(book.projection) == [("Be yourself.", "Oscar Wilde")]
    assert [n.message for n in book.notices.active()] == [QUOTE_SAVED]


def test_author_own_quote_then_delete(book, store):
    async def run():
        await book.initialize()
        book.update_draft("Carpe diem", "Unknown")
        new_id = await book.save_draft()
        assert len(store.scan_all()) == 1
        await book.delete_quote(new_id)

    asyncio.run(run())
    assert store.scan_all() == []
    assert len(book.projection) == 0
    assert QUOTE_DELETED in [n.message for n in book.notices.active()]


def test_projection_matches_store_after_each_command(book, store):
    async def run():
        await book.initialize()
        ids = []
        for i in range(4):
            ids.append(await book.save_quote(f"q{i}", f"a{i}"))
            assert list(book.projection) == store.scan_all()
        await book.delete_quote(ids[1])
        assert list(book.projection) == store.scan_all()
        await book.delete_quote(ids[1])
        assert list(book.projection) == store.scan_all()

    asyncio.run(run())
    assert _pairs(book.projection) == [("q0", "a0"), ("q2", "a2"), ("q3", "a3")]


def test_every_mutation_replaces_projection_once(book):
    async def run():
        await book.initialize()
        v0 = book.projection.version
        new_id = await book.save_quote("q", "a")
        assert book.projection.version == v0 + 1
        await book.delete_quote(new_id)
        assert book.projection.version == v0 + 2

    asyncio.run(run())


def test_overlapping_deletes_both_applied(book, store):
    ids = [store.insert(f"q{i}", "a") for i in range(3)]

    async def run():
        await book.initialize()
        await asyncio.gather(book.delete_quote(ids[0]), book.delete_quote(ids[2]))

    asyncio.run(run())
    assert [r.id for r in store.scan_all()] == [ids[1]]
    assert [r.id for r in book.projection] == [ids[1]]


def test_draft_is_truncated_to_cap(book):
    book.update_draft("x" * 600, "y" * 600)
    assert len(book.draft.quote_text) == 500
    assert len(book.draft.author_name) == 600


def test_draft_cleared_even_when_save_fails(tmp_db_path, provider, speaker):
    failing = FailingInsertStore()
    qb = QuoteBook(store=failing, provider=provider, speaker=speaker)

    async def run():
        await qb.initialize()
        qb.update_draft("lost", "me")
        before = qb.projection.version
        with pytest.raises(StorageFault):
            await qb.save_draft()
        return before

    before = asyncio.run(run())
    assert qb.draft.quote_text == ""
    assert qb.draft.author_name == ""
    assert qb.projection.version == before
    assert [n.kind for n in qb.notices.active()] == ["error"]


def test_failed_fetch_keeps_previous_candidate(book, provider):
    provider.quotes = [("First", "One"), NetworkError("quote_api_status_500")]

    async def run():
        await book.fetch_random_quote()
        with pytest.raises(NetworkError):
            await book.fetch_random_quote()

    asyncio.run(run())
    assert book.candidate == QuoteCandidate("First", "One")


def test_speak_uses_projection(book, speaker, store):
    new_id = store.insert("Speak me", "Anon")
    asyncio.run(book.initialize())

    book.speak(new_id)
    assert speaker.spoken == ["Speak me"]

    with pytest.raises(LookupError):
        book.speak(new_id + 1000)


def test_committed_save_is_confirmed_when_refresh_fails(flaky_store, provider, speaker):
    flaky = flaky_store
    qb = QuoteBook(store=flaky, provider=provider, speaker=speaker)

    async def run():
        await qb.initialize()
        flaky.fail_scans = True
        return await qb.save_quote("dup", "me")

    new_id = asyncio.run(run())

    flaky.fail_scans = False
    assert [(r.id, r.quote_text) for r in QuoteStore().scan_all()] == [(new_id, "dup")]
    messages = [n.message for n in qb.notices.active()]
    assert QUOTE_SAVED in messages
    assert not any(m.startswith("Could not save") for m in messages)
    assert any(m.startswith("Quote list could not be reloaded") for m in messages)
    assert qb.projection.stale
    assert len(qb.projection) == 0

    asyncio.run(qb.refresh())
    assert not qb.projection.stale
    assert [r.id for r in qb.projection] == [new_id]


def test_committed_delete_is_confirmed_when_refresh_fails(flaky_store, provider, speaker):
    flaky = flaky_store
    keep = flaky.insert("keep", "a")
    gone = flaky.insert("gone", "b")
    qb = QuoteBook(store=flaky, provider=provider, speaker=speaker)

    async def run():
        await qb.initialize()
        flaky.fail_scans = True
        await qb.delete_quote(gone)

    asyncio.run(run())

    flaky.fail_scans = False
    assert [r.id for r in QuoteStore().scan_all()] == [keep]
    assert QUOTE_DELETED in [n.message for n in qb.notices.active()]
    assert qb.projection.stale
