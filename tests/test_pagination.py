from lidera.pagination import EXHAUSTED, IDLE, LOADED, Paginator
from lidera.store import EVALUATIONS, Page


def fake_source(total):
    """fetch_fn over `total` items, newest first, cursor = next index."""
    calls = []

    def fetch(cursor, limit):
        calls.append((cursor, limit))
        start = cursor or 0
        items = [{"id": str(i)} for i in range(start, min(start + limit, total))]
        next_index = start + len(items)
        has_more = next_index < total
        return Page(items=items, next_cursor=next_index if has_more else None, has_more=has_more)

    return fetch, calls


def test_load_more_accumulates_until_exhausted():
    fetch, calls = fake_source(5)
    pager = Paginator(page_size=2)

    assert pager.state == IDLE
    assert pager.load_more(fetch)
    assert pager.state == LOADED
    assert pager.load_more(fetch)
    assert pager.load_more(fetch)

    assert [item["id"] for item in pager.items] == ["0", "1", "2", "3", "4"]
    assert pager.state == EXHAUSTED
    assert not pager.can_load_more
    assert not pager.load_more(fetch)
    assert calls == [(None, 2), (2, 2), (4, 2)]


def test_reentrant_load_more_is_ignored():
    fetch, calls = fake_source(6)
    pager = Paginator(page_size=2)
    nested = []

    def reentrant_fetch(cursor, limit):
        assert pager.loading
        assert not pager.can_load_more
        nested.append(pager.load_more(fetch))
        return fetch(cursor, limit)

    assert pager.load_more(reentrant_fetch)

    assert nested == [False]
    assert calls == [(None, 2)]
    assert [item["id"] for item in pager.items] == ["0", "1"]
    assert pager.state == LOADED
    assert pager.can_load_more


def test_initial_load_size_used_for_first_page():
    fetch, calls = fake_source(10)
    pager = Paginator(page_size=3, initial_load=5)

    pager.load_more(fetch)
    pager.load_more(fetch)

    assert calls == [(None, 5), (5, 3)]
    assert len(pager) == 8


def test_failed_fetch_keeps_items_and_records_error():
    fetch, _ = fake_source(5)
    pager = Paginator(page_size=2)
    pager.load_more(fetch)

    def broken(cursor, limit):
        raise RuntimeError("offline")

    assert not pager.load_more(broken)
    assert isinstance(pager.error, RuntimeError)
    assert pager.state == LOADED
    assert len(pager) == 2
    assert pager.can_load_more


def test_local_mutations():
    pager = Paginator()
    pager.items = [{"id": "a", "type": "Operacional"}, {"id": "b", "type": "Operacional"}]

    pager.prepend({"id": "c"})
    pager.update_item("a", {"type": "Tático"})
    pager.remove_item("b")

    assert pager.items == [{"id": "c"}, {"id": "a", "type": "Tático"}]

    pager.remove_items(["a", "c"])
    assert len(pager) == 0


def test_reset_restores_idle_state():
    fetch, _ = fake_source(1)
    pager = Paginator()
    pager.load_more(fetch)

    pager.reset()

    assert pager.items == []
    assert pager.cursor is None
    assert pager.has_more
    assert pager.state == IDLE


def test_pages_through_store(store, company):
    for i in range(3):
        store.create(EVALUATIONS, {"employeeName": f"E{i}"}, company["id"])
    pager = Paginator(page_size=2)

    def fetch(cursor, limit):
        return store.fetch_page(EVALUATIONS, company["id"], cursor, limit)

    while pager.can_load_more:
        pager.load_more(fetch)

    assert [item["employeeName"] for item in pager.items] == ["E2", "E1", "E0"]
