import json
import sqlite3

from click.testing import CliRunner

from sales_insights.cli import main as cli


def _invoke(tmp_path, db_path, *args):
    runner = CliRunner()
    return runner.invoke(
        cli,
        ['--config', str(tmp_path / 'missing.yaml'), '--db', str(db_path), *args],
    )


def test_cli_init_from_file(tmp_path, seed_entries):
    feed = tmp_path / 'feed.json'
    feed.write_text(json.dumps(seed_entries))
    db_path = tmp_path / 'data' / 'sales.db'

    res = _invoke(tmp_path, db_path, 'init', '--file', str(feed))
    assert res.exit_code == 0, res.output
    assert 'Stored 5 transaction(s)' in res.output

    conn = sqlite3.connect(db_path)
    rows = conn.execute('SELECT id, sale_month FROM transactions ORDER BY id').fetchall()
    conn.close()
    assert rows == [(1, 3), (2, 3), (3, 3), (4, 4), (5, 4)]


def test_cli_init_from_url(tmp_path, seed_entries, monkeypatch):
    calls = {}

    def fake_fetch(url):
        calls['url'] = url
        return seed_entries

    monkeypatch.setattr('sales_insights.cli.fetch_seed', fake_fetch)
    db_path = tmp_path / 'sales.db'

    res = _invoke(tmp_path, db_path, 'init', '--url', 'https://feed.example.com/x.json')
    assert res.exit_code == 0, res.output
    assert calls['url'] == 'https://feed.example.com/x.json'


def test_cli_statistics(tmp_path, db_path):
    res = _invoke(tmp_path, db_path, 'statistics', '--month', 'March')
    assert res.exit_code == 0, res.output
    assert json.loads(res.output) == {
        'totalSales': 1150,
        'totalSoldItems': 3,
        'totalNotSoldItems': 2,
    }


def test_cli_requires_month(tmp_path, db_path):
    for command in ('statistics', 'bar-chart', 'pie-chart', 'combined'):
        res = _invoke(tmp_path, db_path, command)
        assert res.exit_code == 2, command
        assert 'month is required' in res.output


def test_cli_transactions_paging(tmp_path, db_path):
    res = _invoke(tmp_path, db_path, 'transactions', '--page', '2', '--per-page', '2')
    assert res.exit_code == 0, res.output
    payload = json.loads(res.output)
    assert payload['total'] == 5
    assert [r['id'] for r in payload['records']] == [3, 4]


def test_cli_charts_and_combined(tmp_path, db_path):
    res = _invoke(tmp_path, db_path, 'bar-chart', '--month', '4')
    assert res.exit_code == 0, res.output
    bands = {b['range']: b['count'] for b in json.loads(res.output)}
    assert bands['101-200'] == 1
    assert bands['301-400'] == 1

    res = _invoke(tmp_path, db_path, 'pie-chart', '--month', 'april')
    assert res.exit_code == 0, res.output
    assert len(json.loads(res.output)) == 2

    res = _invoke(tmp_path, db_path, 'combined', '--month', 'mar')
    assert res.exit_code == 0, res.output
    payload = json.loads(res.output)
    assert set(payload) == {
        'records', 'totalSales', 'totalSoldItems',
        'totalNotSoldItems', 'priceRanges', 'categories',
    }
    assert payload['totalSoldItems'] == 3
