"""Stable session identifiers.

The breadcrumb shape picks the rule:

* 3 labels, special assemblies: ``{year}.{number}``
* 4 labels, joint sittings of the National Assembly:
  ``{year}.{subYearIndex}.{number}``
* 5 labels, House of Representatives:
  ``{set}.{year}.{subYearIndex}.{number}``

``subYearIndex`` numbers the sitting types (regular, extraordinary...) of a
year in first-seen order. Indices already published in the previous dataset
are kept and new labels are appended after them. Records whose source URL
and archive path appear in the previous dataset keep their old id. Ids that
still collide get ``#n`` suffixes.
"""

import logging
import re
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import UnexpectedBreadcrumbShape
from .models import AssemblySession, SessionRecord, UnresolvedRecord

logger = logging.getLogger("parliament_archive")

_SET_PREFIX = re.compile(r"^ชุดที่\s*")
_YEAR_PREFIX = re.compile(r"^(?:ปีที่|ปี|พ\.ศ\.)\s*")
_NUMBER_PREFIX = re.compile(r"^ครั้งที่\s*")
_NUMBER_YEAR_SUFFIX = re.compile(r"\s*/\s*[0-9]{4}$")
_ID_SUFFIX = re.compile(r"#([0-9]+)$")


def _strip(pattern, label: str) -> str:
    return pattern.sub("", label.strip()).strip()


def session_number(label: str, separator: str) -> str:
    """Sitting number: "ครั้งที่ 5/2563" -> "5". A remaining "/" becomes separator."""
    number = _strip(_NUMBER_PREFIX, label)
    number = _NUMBER_YEAR_SUFFIX.sub("", number)
    number = re.sub(r"\s+", "", number)
    return number.replace("/", separator)


def split_suffix(session_id: str) -> Tuple[str, Optional[int]]:
    """Root id and its ``#n`` suffix, if any."""
    m = _ID_SUFFIX.search(session_id)
    if not m:
        return session_id, None
    return session_id[:m.start()], int(m.group(1))


class SubYearIndex:
    """First-seen ordinal of sub-year labels per group; never renumbers."""

    def __init__(self):
        self._groups: Dict[tuple, Dict[str, int]] = defaultdict(dict)

    def seed(self, group: tuple, label: str, index: int):
        self._groups[group].setdefault(label, index)

    def index(self, group: tuple, label: str) -> int:
        labels = self._groups[group]
        if label not in labels:
            labels[label] = max(labels.values(), default=-1) + 1
        return labels[label]


def _group_and_label(session: AssemblySession):
    """(group key, sub-year label, id position of its index) for indexed rules."""
    crumbs = session.breadcrumb
    if len(crumbs) == 4:
        return (session.essemble, _strip(_YEAR_PREFIX, crumbs[1])), crumbs[2], 1
    if len(crumbs) == 5:
        group = (session.essemble, _strip(_SET_PREFIX, crumbs[1]), _strip(_YEAR_PREFIX, crumbs[2]))
        return group, crumbs[3], 2
    return None


def assign_id(session: AssemblySession, sub_years: SubYearIndex) -> str:
    crumbs = session.breadcrumb

    if len(crumbs) == 3:
        year = _strip(_YEAR_PREFIX, crumbs[1])
        return f"{year}.{session_number(crumbs[2], '@')}"

    if len(crumbs) == 4:
        group, label, _ = _group_and_label(session)
        year = group[1]
        return f"{year}.{sub_years.index(group, label)}.{session_number(crumbs[3], '-')}"

    if len(crumbs) == 5:
        group, label, _ = _group_and_label(session)
        _, meeting_set, year = group
        return (f"{meeting_set}.{year}.{sub_years.index(group, label)}."
                f"{session_number(crumbs[4], '@')}")

    raise UnexpectedBreadcrumbShape(
        f"unexpected breadcrumb of {len(crumbs)} labels: {crumbs}"
    )


def _seed_from_previous(previous: Iterable[AssemblySession], sub_years: SubYearIndex):
    for session in previous:
        shape = _group_and_label(session)
        if shape is None or not session.session_id:
            continue
        group, label, position = shape
        parts = split_suffix(session.session_id)[0].split(".")
        if len(parts) > position and parts[position].isdigit():
            sub_years.seed(group, label, int(parts[position]))


def sort_by_date(sessions: List[AssemblySession]) -> List[AssemblySession]:
    """Ascending by date; undated sessions last, relative order kept."""
    return sorted(sessions, key=lambda s: (s.date is None, s.date or ""))


def resolve_collisions(sessions: List[AssemblySession]):
    groups = defaultdict(list)
    for session in sessions:
        root, _ = split_suffix(session.session_id)
        groups[(root, session.essemble)].append(session)

    for (root, assembly), members in groups.items():
        if len(members) < 2:
            continue
        top = max((n for _, n in (split_suffix(s.session_id) for s in members)
                   if n is not None), default=0)
        for session in members:
            if split_suffix(session.session_id)[1] is None:
                top += 1
                session.session_id = f"{root}#{top}"
        logger.warning(f"Collision on {assembly.value} {root}: {len(members)} sessions")


def resolve_sessions(records: Iterable[SessionRecord],
                     previous: Iterable[SessionRecord] = ()) -> List[SessionRecord]:
    """Assign ids to parsed sessions; returns dated, undated, then unresolved."""
    previous_sessions = [p for p in previous if isinstance(p, AssemblySession) and p.session_id]
    known = {(p.source_url, p.file_path): p.session_id for p in previous_sessions}

    sub_years = SubYearIndex()
    _seed_from_previous(previous_sessions, sub_years)

    sessions: List[AssemblySession] = []
    unresolved: List[UnresolvedRecord] = []
    for record in records:
        if isinstance(record, UnresolvedRecord):
            unresolved.append(record)
        else:
            sessions.append(record)

    resolved = []
    reused = 0
    for session in sort_by_date(sessions):
        previous_id = known.get((session.source_url, session.file_path))
        if previous_id:
            session.session_id = previous_id
            reused += 1
        else:
            try:
                session.session_id = assign_id(session, sub_years)
            except UnexpectedBreadcrumbShape as e:
                unresolved.append(UnresolvedRecord(session.source_url, session.file_path, str(e)))
                continue
        resolved.append(session)

    resolve_collisions(resolved)
    logger.info(
        f"Resolved {len(resolved)} sessions ({reused} reused), {len(unresolved)} unresolved"
    )
    return resolved + unresolved
