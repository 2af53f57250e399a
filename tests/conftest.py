import itertools

import pytest

from parliament_archive.config import AppConfig
from parliament_archive.models import AssemblySession, AssemblyType

_ids = itertools.count(1)

SOURCE_URL = "https://msbis.parliament.go.th/ewtadmin/ewt/parliament_report/main_warehouse_detail.php?mid=1234"


def detail_table(breadcrumb, date_line, documents=(), marker=True):
    """Build a metadata table shaped like the portal's detail fragment."""
    crumbs = " &gt; ".join(f'<a href="#">{label}</a>' for label in breadcrumb)
    rows = [
        "<tr><td>ข้อมูลรายงานการประชุม</td></tr>",
        f"<tr><td>{crumbs}</td></tr>",
        f"<tr><td> {date_line} </td></tr>",
    ]
    if marker:
        rows.append("<tr><td>ข้อมูลการประชุม</td></tr>")
    for text, href in documents:
        rows.append(f'<tr><td><a href="{href}">{text}</a></td></tr>')
    return "<table><tbody>" + "".join(rows) + "</tbody></table>"


@pytest.fixture
def config(tmp_path):
    cfg = AppConfig(data_dir=str(tmp_path))
    cfg.crawl.max_pages_per_run = 3
    return cfg


def make_session(breadcrumb, date=None, url=None, assembly=AssemblyType.HOUSE_OF_REPRESENTATIVES):
    url = url or f"https://example.test/meeting/{next(_ids)}"
    return AssemblySession(
        essemble=assembly,
        session_info=list(breadcrumb) + [date or "-"],
        source_url=url,
        file_path=f"downloaded-html/{url.rsplit('/', 1)[-1]}.html",
        date=date,
    )
