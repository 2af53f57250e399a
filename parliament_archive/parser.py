"""Parse archived meeting-detail fragments into AssemblySession records.

The fragment is the portal's metadata table: row 2 holds the breadcrumb
links (assembly, term, year, sitting...), row 3 the meeting date line, and
the rows from the "ข้อมูลการประชุม" marker onward link the meeting
documents.
"""

import logging
from typing import Iterable, List
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .errors import AssemblyTypeNotFound, RecordParseError, TableNotFound
from .models import (AssemblySession, AssemblyType, Document, ReportUrl,
                     SessionRecord, UnresolvedRecord)
from .thai import first_date, to_arabic_digits

logger = logging.getLogger("parliament_archive")

DOCUMENTS_MARKER = "ข้อมูลการประชุม"

# Breadcrumb label -> canonical assembly. Checked in this order.
ASSEMBLY_LABELS = {
    "สภาร่างรัฐธรรมนูญ": AssemblyType.CONSTITUTION_DRAFTING_ASSEMBLY,
    "สภาปฏิรูปแห่งชาติ": AssemblyType.NATIONAL_REFORM_COUNCIL,
    "สภาขับเคลื่อนการปฏิรูปประเทศ": AssemblyType.NATIONAL_REFORM_STEERING_ASSEMBLY,
    "สภานิติบัญญัติแห่งชาติ": AssemblyType.NATIONAL_LEGISLATIVE_ASSEMBLY,
    "ข้อมูลการประชุมสภานิติบัญญัติ": AssemblyType.NATIONAL_LEGISLATIVE_ASSEMBLY,
    "ข้อมูลการประชุมสภาผู้แทนราษฎร": AssemblyType.HOUSE_OF_REPRESENTATIVES,
    "การประชุมสภาร่างรัฐธรรมนูญ": AssemblyType.CONSTITUTION_DRAFTING_ASSEMBLY,
    "ข้อมูลการประชุมร่วมกันของรัฐสภา": AssemblyType.NATIONAL_ASSEMBLY,
    "ข้อมูลการประชุมสภาปฏิรูปแห่งชาติ": AssemblyType.NATIONAL_REFORM_COUNCIL,
}

_PLACEHOLDER_PREFIXES = ("#", "javascript:", "about:blank")


def _rows(table) -> list:
    """Rows that belong to this table, not to tables nested inside it."""
    return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]


def find_assembly(subnames: List[str]):
    """Return (matched label, assembly type) for the first known label."""
    for label, assembly in ASSEMBLY_LABELS.items():
        if label in subnames:
            return label, assembly
    raise AssemblyTypeNotFound(f"assembly type not found in {subnames}")


def extract_documents(rows: list, source_url: str) -> List[Document]:
    documents = []
    started = False
    for row in rows:
        if not started and row.get_text().strip() == DOCUMENTS_MARKER:
            started = True
        if not started:
            continue
        for a in row.find_all("a"):
            href = (a.get("href") or "").strip()
            if not href or href.startswith(_PLACEHOLDER_PREFIXES):
                continue
            documents.append(Document(text=a.get_text(), href=urljoin(source_url, href)))
    return documents


def parse_html(html: str, source_url: str, file_path: str) -> AssemblySession:
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find("table")
    if table is None:
        raise TableNotFound("table not found")

    rows = _rows(table)
    if len(rows) < 3:
        raise TableNotFound(f"metadata table has {len(rows)} rows")

    subnames = [a.get_text().strip() for a in rows[1].find_all("a")]
    raw_date = rows[2].get_text().strip()

    label, assembly = find_assembly(subnames)
    start = subnames.index(label)
    session_info = [to_arabic_digits(s) for s in subnames[start:] + [raw_date]]

    return AssemblySession(
        essemble=assembly,
        session_info=session_info,
        source_url=source_url,
        file_path=file_path,
        date=first_date(to_arabic_digits(raw_date)),
        documents=extract_documents(rows, source_url),
    )


def parse_record(report: ReportUrl) -> SessionRecord:
    """Parse one archived file. Failures come back as UnresolvedRecord."""
    try:
        with open(report.file_path, encoding="utf-8") as f:
            html = f.read()
        return parse_html(html, report.source_url, report.file_path)
    except (RecordParseError, UnicodeDecodeError, OSError) as e:
        logger.debug(f"Unresolved {report.file_path}: {e}")
        return UnresolvedRecord(report.source_url, report.file_path, str(e))


def parse_reports(reports: Iterable[ReportUrl]) -> List[SessionRecord]:
    return [parse_record(r) for r in reports]
