import pytest

from conftest import SOURCE_URL, detail_table
from parliament_archive.errors import AssemblyTypeNotFound, TableNotFound
from parliament_archive.models import AssemblySession, AssemblyType, Document, ReportUrl, UnresolvedRecord
from parliament_archive.parser import find_assembly, parse_html, parse_record, parse_reports

HOUSE_CRUMBS = ["หน้าหลัก", "ข้อมูลการประชุมสภาผู้แทนราษฎร", "ชุดที่ ๒๕", "ปีที่ ๒",
                "สมัยสามัญ", "ครั้งที่ ๕/๒๕๖๓"]


def test_parses_house_meeting():
    html = detail_table(
        HOUSE_CRUMBS,
        "วันพุธที่ ๑๕ มกราคม พ.ศ. ๒๕๖๓",
        documents=[("รายงานการประชุม", "files/report.pdf"),
                   ("บันทึกการออกเสียง", "https://cdn.example.test/vote.pdf")],
    )
    session = parse_html(html, SOURCE_URL, "downloaded-html/1/1.html")

    assert session.essemble is AssemblyType.HOUSE_OF_REPRESENTATIVES
    assert session.session_info == [
        "ข้อมูลการประชุมสภาผู้แทนราษฎร", "ชุดที่ 25", "ปีที่ 2", "สมัยสามัญ",
        "ครั้งที่ 5/2563", "วันพุธที่ 15 มกราคม พ.ศ. 2563",
    ]
    assert session.date == "2020-01-15"
    assert session.session_id == ""
    assert session.documents == [
        Document("รายงานการประชุม",
                 "https://msbis.parliament.go.th/ewtadmin/ewt/parliament_report/files/report.pdf"),
        Document("บันทึกการออกเสียง", "https://cdn.example.test/vote.pdf"),
    ]


def test_placeholder_links_are_skipped():
    html = detail_table(
        HOUSE_CRUMBS, "15 มกราคม 2563",
        documents=[("ว่าง", "#"), ("สคริปต์", "javascript:void(0)"), ("ไฟล์", "a.pdf")],
    )
    session = parse_html(html, SOURCE_URL, "f.html")
    assert [d.text for d in session.documents] == ["ไฟล์"]


def test_links_before_marker_are_not_documents():
    html = detail_table(HOUSE_CRUMBS, "15 มกราคม 2563",
                        documents=[("ไฟล์", "a.pdf")], marker=False)
    assert parse_html(html, SOURCE_URL, "f.html").documents == []


def test_missing_date_is_allowed():
    session = parse_html(detail_table(HOUSE_CRUMBS, "ไม่ระบุ"), SOURCE_URL, "f.html")
    assert session.date is None
    assert session.session_info[-1] == "ไม่ระบุ"


def test_no_table():
    with pytest.raises(TableNotFound):
        parse_html("<div>nothing here</div>", SOURCE_URL, "f.html")


def test_unknown_assembly():
    with pytest.raises(AssemblyTypeNotFound):
        parse_html(detail_table(["หน้าหลัก", "อื่น ๆ"], "15 มกราคม 2563"), SOURCE_URL, "f.html")


def test_assembly_labels_are_checked_in_table_order():
    label, assembly = find_assembly(["ข้อมูลการประชุมสภานิติบัญญัติ", "สภานิติบัญญัติแห่งชาติ"])
    assert label == "สภานิติบัญญัติแห่งชาติ"
    assert assembly is AssemblyType.NATIONAL_LEGISLATIVE_ASSEMBLY


def test_joint_sitting_maps_to_national_assembly():
    html = detail_table(["ข้อมูลการประชุมร่วมกันของรัฐสภา", "ปี ๒๕๖๓", "สมัยสามัญประจำปีครั้งที่หนึ่ง",
                         "ครั้งที่ ๓/๒๕๖๓"], "๓ ก.ค. ๒๕๖๓")
    session = parse_html(html, SOURCE_URL, "f.html")
    assert session.essemble is AssemblyType.NATIONAL_ASSEMBLY
    assert session.date == "2020-07-03"


def test_parse_record_reads_archived_file_with_header(tmp_path):
    path = tmp_path / "1.html"
    path.write_text("<!--\n  source: x\n-->\n" + detail_table(HOUSE_CRUMBS, "15 มกราคม 2563"),
                    encoding="utf-8")
    record = parse_record(ReportUrl(SOURCE_URL, str(path)))
    assert isinstance(record, AssemblySession)
    assert record.file_path == str(path)


def test_parse_failures_are_captured_per_record(tmp_path):
    path = tmp_path / "bad.html"
    path.write_text("<p>empty</p>", encoding="utf-8")
    record = parse_record(ReportUrl(SOURCE_URL, str(path)))
    assert isinstance(record, UnresolvedRecord)
    assert record.reason == "table not found"
    assert record.to_dict() == {"sourceUrl": SOURCE_URL, "filePath": str(path),
                                "error": "table not found"}


def test_missing_file_is_unresolved(tmp_path):
    record = parse_record(ReportUrl(SOURCE_URL, str(tmp_path / "missing.html")))
    assert isinstance(record, UnresolvedRecord)


def test_undecodable_file_is_unresolved(tmp_path):
    path = tmp_path / "cut.html"
    path.write_bytes(b"<table><tr><td>\xe0\xb8</td></tr></table>")
    records = parse_reports([ReportUrl(SOURCE_URL, str(path)),
                             ReportUrl(SOURCE_URL + "2", str(tmp_path / "missing.html"))])
    assert [type(r) for r in records] == [UnresolvedRecord, UnresolvedRecord]
    assert records[0].file_path == str(path)
