import json

import pytest

from conftest import SOURCE_URL, detail_table
from parliament_archive.archive import HtmlArchive
from parliament_archive.dataset import load_sessions, write_sessions
from parliament_archive.errors import StateCorruption
from parliament_archive.main import collect_reports, main, run_parse
from parliament_archive.models import AssemblySession, ReportUrl, UnresolvedRecord
from parliament_archive.state import CrawlState

HOUSE = ["ข้อมูลการประชุมสภาผู้แทนราษฎร", "ชุดที่ ๒๕", "ปีที่ ๒", "สมัยสามัญ", "ครั้งที่ ๕/๒๕๖๓"]


def archive_meetings(config):
    archive = HtmlArchive(config.path(config.html_dir))
    state = CrawlState(config.state_path(), len(config.crawl.categories))
    fragments = [
        (SOURCE_URL + "1", detail_table(HOUSE, "๑๕ มกราคม ๒๕๖๓", [("รายงาน", "r.pdf")])),
        (SOURCE_URL + "2", detail_table(["ข้อมูลการประชุมสภาปฏิรูปแห่งชาติ", "ปี ๒๕๕๘", "ครั้งที่ ๓/๒๕๕๘"],
                                        "๒ มีนาคม ๒๕๕๘")),
        (SOURCE_URL + "3", "<div>broken</div>"),
    ]
    for url, html in fragments:
        path, _ = archive.save(html, url)
        state.upsert_report(ReportUrl(url, path))
    state.save()
    return archive, state


def test_parse_pass_writes_dataset(config):
    archive_meetings(config)
    records = run_parse(config)

    assert [type(r) for r in records] == [AssemblySession, AssemblySession, UnresolvedRecord]
    assert [r.session_id for r in records[:2]] == ["2558.3", "25.2.0.5"]

    with open(config.path(config.sessions_file), encoding="utf-8") as f:
        raw = json.load(f)
    assert raw[1]["sessionId"] == "25.2.0.5"
    assert raw[1]["essembleName"] == "สภาผู้แทนราษฎร"
    assert raw[1]["date"] == "2020-01-15"
    assert raw[2]["error"] == "table not found"
    assert set(raw[2]) == {"sourceUrl", "filePath", "error"}


def test_parse_pass_is_idempotent(config):
    archive_meetings(config)
    first = [r.to_dict() for r in run_parse(config)]
    second = [r.to_dict() for r in run_parse(config)]
    assert first == second


def test_orphaned_archive_files_are_recovered(config):
    archive, _ = archive_meetings(config)
    orphan = detail_table(HOUSE[:4] + ["ครั้งที่ ๖/๒๕๖๓"], "๒๒ มกราคม ๒๕๖๓")
    archive.save(orphan, SOURCE_URL + "4")

    reports = collect_reports(config)
    assert [r.source_url for r in reports][-1] == SOURCE_URL + "4"

    config.parse.include_orphans = False
    assert len(collect_reports(config)) == 3


def test_dataset_round_trip(tmp_path):
    path = str(tmp_path / "sessions.json")
    records = [UnresolvedRecord("https://x", "x.html", "boom")]
    write_sessions(path, records)
    assert load_sessions(path) == records
    assert load_sessions(str(tmp_path / "missing.json")) == []


def test_malformed_previous_dataset_is_fatal(tmp_path):
    path = tmp_path / "sessions.json"
    path.write_text("[{not json", encoding="utf-8")
    with pytest.raises(StateCorruption):
        load_sessions(str(path))

    path.write_text(json.dumps([{"essembleName": "nope", "sourceUrl": "x", "filePath": "y"}]),
                    encoding="utf-8")
    with pytest.raises(StateCorruption):
        load_sessions(str(path))


def test_parse_pass_keeps_previous_dataset_when_it_is_corrupt(config):
    archive_meetings(config)
    sessions_path = config.path(config.sessions_file)
    with open(sessions_path, "w", encoding="utf-8") as f:
        f.write("[{not json")

    with pytest.raises(StateCorruption):
        run_parse(config)
    with open(sessions_path, encoding="utf-8") as f:
        assert f.read() == "[{not json"


def test_cli_exits_with_status_2_on_corrupt_state(tmp_path, monkeypatch):
    monkeypatch.delenv("ARCHIVE_DATA_DIR", raising=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"data_dir: {tmp_path}\n", encoding="utf-8")
    (tmp_path / "html-scraper-states-all.json").write_text("{not json", encoding="utf-8")

    for flags in (["--stats"], ["--parse"]):
        with pytest.raises(SystemExit) as exc:
            main(flags + ["--config", str(config_path)])
        assert exc.value.code == 2
