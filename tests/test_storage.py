# File: tests/test_storage.py
import json

import pytest
from sitemap_monitor.models import NewItem, ScanSummary, Site
from sitemap_monitor.storage import InMemoryRepository, JsonFileRepository, filter_new_items, item_key
from sitemap_monitor.utils import hash_url


def make_item(item_id: str, url: str, site_id: str = "site_a", **kwargs) -> NewItem:
    data = dict(
        id=item_id,
        site_id=site_id,
        domain="a.example",
        url=url,
        keyword_auto="kw",
        keyword_final="kw",
        review_status="pending",
        url_type="game",
        discovered_at="2024-05-01T12:00:00.000Z",
        source_sitemap_url="https://a.example/sitemap.xml",
    )
    data.update(kwargs)
    return NewItem(**data)


@pytest.fixture(params=["json", "memory"])
def repo(request, tmp_path):
    if request.param == "json":
        return JsonFileRepository(tmp_path / "data")
    return InMemoryRepository()


def test_json_repository_creates_files(tmp_path):
    data_dir = tmp_path / "nested" / "data"
    JsonFileRepository(data_dir)
    assert json.loads((data_dir / "sites.json").read_text()) == []
    assert json.loads((data_dir / "seen_urls.json").read_text()) == {}
    assert json.loads((data_dir / "new_items.json").read_text()) == []


def test_json_repository_keeps_existing_files(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "seen_urls.json").write_text(json.dumps({"site_a": {"h": "https://a.example/x"}}))
    repo = JsonFileRepository(data_dir)
    assert repo.load_seen("site_a") == {"h": "https://a.example/x"}


def test_sites_round_trip(repo):
    summary = ScanSummary("success", 3, 1, 120, ("https://a.example/new",))
    site = Site(id="site_a", domain="a.example", sitemap_url="https://a.example/sitemap.xml",
                status="ok", baseline_ready=True, seen_count=3, last_result=summary)
    repo.save_sites([site])
    loaded = repo.load_sites()
    assert loaded == [site]
    assert loaded[0].last_result == summary


def test_save_site_upserts_in_place(repo):
    a = Site(id="site_a", domain="a.example", sitemap_url="https://a.example/sitemap.xml")
    b = Site(id="site_b", domain="b.example", sitemap_url="https://b.example/sitemap.xml")
    repo.save_sites([a, b])

    a.status = "failed"
    a.error_message = "HTTP 500"
    repo.save_site(a)
    repo.save_site(Site(id="site_c", domain="c.example", sitemap_url="https://c.example/sitemap.xml"))

    sites = repo.load_sites()
    assert [s.id for s in sites] == ["site_a", "site_b", "site_c"]
    assert sites[0].error_message == "HTTP 500"


def test_seen_sets_are_isolated_per_site(repo):
    url = "https://shared.example/game"
    repo.save_seen("site_a", {hash_url(url): url})
    assert repo.load_seen("site_b") == {}
    repo.save_seen("site_b", {})
    assert repo.load_seen("site_a") == {hash_url(url): url}


def test_load_seen_returns_copy(repo):
    repo.save_seen("site_a", {"h1": "https://a.example/1"})
    seen = repo.load_seen("site_a")
    seen["h2"] = "https://a.example/2"
    assert repo.load_seen("site_a") == {"h1": "https://a.example/1"}


def test_append_items_dedups_per_site_and_url(repo):
    first = repo.append_items([make_item("new_1", "https://a.example/x")])
    again = repo.append_items([
        make_item("new_2", "https://a.example/x"),
        make_item("new_3", "https://a.example/x", site_id="site_b"),
        make_item("new_4", "https://a.example/y"),
        make_item("new_5", "https://a.example/y"),
    ])
    assert [i.id for i in first] == ["new_1"]
    assert [i.id for i in again] == ["new_3", "new_4"]
    assert [i.id for i in repo.load_items()] == ["new_1", "new_3", "new_4"]
    assert [i.id for i in repo.load_items("site_b")] == ["new_3"]


def test_update_item(repo):
    repo.append_items([make_item("new_1", "https://a.example/x")])

    updated = repo.update_item("new_1", keyword_final="space shooter")
    assert updated.keyword_final == "space shooter"
    assert updated.review_status == "pending"

    updated = repo.update_item("new_1", review_status="confirmed")
    assert updated.keyword_final == "space shooter"
    assert updated.review_status == "confirmed"
    assert repo.load_items()[0].review_status == "confirmed"


def test_update_unknown_item(repo):
    assert repo.update_item("new_missing", review_status="ignored") is None


def test_item_title_omitted_when_absent(tmp_path):
    repo = JsonFileRepository(tmp_path)
    repo.append_items([make_item("new_1", "https://a.example/x"),
                       make_item("new_2", "https://a.example/y", title="Y Game")])
    rows = json.loads((tmp_path / "new_items.json").read_text(encoding="utf-8"))
    assert "title" not in rows[0]
    assert rows[1]["title"] == "Y Game"


def test_legacy_item_rows(tmp_path):
    rows = [
        {"id": "new_old", "site_id": "site_a", "url": "https://a.example/old-game", "game_keyword": "old game"},
        {"site_id": "site_a", "url": "https://a.example/broken"},
    ]
    (tmp_path / "new_items.json").write_text(json.dumps(rows), encoding="utf-8")
    repo = JsonFileRepository(tmp_path)

    items = repo.load_items()
    assert len(items) == 1
    assert items[0].keyword_auto == items[0].keyword_final == "old game"
    assert items[0].review_status == "pending"
    assert items[0].url_type == "game"


def test_corrupt_json_raises_value_error(tmp_path):
    (tmp_path / "sites.json").write_text("{not json", encoding="utf-8")
    repo = JsonFileRepository(tmp_path)
    with pytest.raises(ValueError):
        repo.load_sites()


def test_no_temp_files_left_behind(tmp_path):
    repo = JsonFileRepository(tmp_path)
    repo.save_seen("site_a", {"h": "https://a.example/x"})
    assert sorted(p.name for p in tmp_path.iterdir()) == ["new_items.json", "seen_urls.json", "sites.json"]


def test_filter_new_items_and_key():
    existing = [make_item("new_1", "https://a.example/x")]
    batch = [make_item("new_2", "https://a.example/x"), make_item("new_3", "https://a.example/z")]
    assert [i.id for i in filter_new_items(existing, batch)] == ["new_3"]
    assert item_key("site_a", "https://a.example/x") == f"site_a_{hash_url('https://a.example/x')}"


def _seed_rows(tmp_path, rows):
    (tmp_path / "new_items.json").write_text(json.dumps(rows), encoding="utf-8")
    return JsonFileRepository(tmp_path)


def _rows(tmp_path):
    return json.loads((tmp_path / "new_items.json").read_text(encoding="utf-8"))


def test_camel_case_rows_are_readable(tmp_path):
    repo = _seed_rows(tmp_path, [{
        "id": "new_camel",
        "siteId": "site_a",
        "domain": "a.example",
        "url": "https://a.example/camel-run",
        "keywordAuto": "camel run",
        "keywordFinal": "camel run 2",
        "reviewStatus": "confirmed",
        "urlType": "game",
        "discoveredAt": "2024-03-01T00:00:00.000Z",
        "sourceSitemapUrl": "https://a.example/sitemap.xml",
    }])

    (item,) = repo.load_items("site_a")
    assert item.keyword_auto == "camel run"
    assert item.keyword_final == "camel run 2"
    assert item.review_status == "confirmed"
    assert item.discovered_at == "2024-03-01T00:00:00.000Z"
    assert item.source_sitemap_url == "https://a.example/sitemap.xml"


def test_append_keeps_unreadable_rows(tmp_path):
    unreadable = {"siteId": "site_a", "url": "https://a.example/old", "gameKeyword": "old"}
    repo = _seed_rows(tmp_path, [unreadable])

    added = repo.append_items([make_item("new_1", "https://a.example/x")])

    assert [i.id for i in added] == ["new_1"]
    rows = _rows(tmp_path)
    assert len(rows) == 2
    assert rows[0] == unreadable
    assert rows[1]["id"] == "new_1"


def test_unreadable_rows_still_block_duplicates(tmp_path):
    repo = _seed_rows(tmp_path, [{"siteId": "site_a", "url": "https://a.example/old"}])
    assert repo.append_items([make_item("new_1", "https://a.example/old")]) == []
    assert len(_rows(tmp_path)) == 1


def test_update_keeps_unreadable_rows(tmp_path):
    unreadable = ["not", "an", "item"]
    repo = _seed_rows(tmp_path, [unreadable, make_item("new_1", "https://a.example/x").to_dict()])

    updated = repo.update_item("new_1", review_status="ignored")

    assert updated.review_status == "ignored"
    rows = _rows(tmp_path)
    assert rows[0] == unreadable
    assert rows[1]["review_status"] == "ignored"
