import io
import json

import pytest

from sales_insights.core.filters import TransactionFilter
from sales_insights.database import TransactionStore
from sales_insights.seed import (
    SeedError,
    fetch_seed,
    initialize_store,
    load_seed_file,
    parse_seed,
)


def test_parse_seed_maps_feed_fields(seed_entries):
    txs = parse_seed(seed_entries)
    assert len(txs) == 5
    assert txs[3].id == 4
    assert txs[3].price == 109.95
    assert txs[3].date_of_sale == "2022-04-01"
    assert txs[3].image == "https://example.com/4.jpg"
    assert not hasattr(txs[3], "sold")


@pytest.mark.parametrize(
    "entry, message",
    [
        ({"title": "x", "price": 1, "dateOfSale": "2021-01-01"}, "Missing 'id'"),
        ({"id": 1, "title": "x", "price": -1, "dateOfSale": "2021-01-01"}, "Negative price"),
        ({"id": 1, "title": "x", "price": "cheap", "dateOfSale": "2021-01-01"}, "Invalid seed entry"),
        ({"id": 1, "title": "x", "price": 1, "dateOfSale": "someday"}, "Invalid seed entry"),
        ("not an object", "must be an object"),
    ],
)
def test_parse_seed_rejects_bad_entries(entry, message):
    with pytest.raises(SeedError, match=message):
        parse_seed([entry])


def test_initialize_store_replaces_contents(db_path, seed_entries):
    with TransactionStore(str(db_path)) as store:
        stored = initialize_store(store, seed_entries[:2])
        assert stored == 2
        assert store.count(TransactionFilter()) == 2


def test_initialize_store_keeps_old_data_on_bad_feed(db_path, seed_entries):
    broken = seed_entries + [{"id": 99, "title": "x", "price": 1}]
    with TransactionStore(str(db_path)) as store:
        with pytest.raises(SeedError):
            initialize_store(store, broken)
        assert store.count(TransactionFilter()) == 5


def test_load_seed_file(tmp_path, seed_entries):
    path = tmp_path / "feed.json"
    path.write_text(json.dumps(seed_entries))
    assert load_seed_file(path) == seed_entries

    path.write_text(json.dumps({"not": "a list"}))
    with pytest.raises(SeedError):
        load_seed_file(path)


def test_fetch_seed(monkeypatch, seed_entries):
    calls = {}

    def fake_urlopen(req, timeout):
        calls["url"] = req.full_url
        calls["timeout"] = timeout
        return io.BytesIO(json.dumps(seed_entries).encode("utf-8"))

    monkeypatch.setattr("sales_insights.seed.urllib.request.urlopen", fake_urlopen)

    data = fetch_seed("https://feed.example.com/transactions.json", timeout=5)
    assert data == seed_entries
    assert calls == {"url": "https://feed.example.com/transactions.json", "timeout": 5}
