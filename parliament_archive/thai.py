"""Thai numerals and Buddhist-era dates.

The portal writes numbers with Thai digit glyphs and dates such as
``15 มกราคม พ.ศ. 2563``. Everything downstream works on Arabic digits and
ISO-8601 Gregorian dates.
"""

import re
from typing import Iterator

from .errors import UnknownMonth

BUDDHIST_ERA_OFFSET = 543

_THAI_DIGITS = str.maketrans("๐๑๒๓๔๕๖๗๘๙", "0123456789")

MONTHS = {
    "มกราคม": 1, "ม.ค.": 1,
    "กุมภาพันธ์": 2, "ก.พ.": 2,
    "มีนาคม": 3, "มี.ค.": 3,
    "เมษายน": 4, "เม.ย.": 4,
    "พฤษภาคม": 5, "พ.ค.": 5,
    "มิถุนายน": 6, "มิ.ย.": 6,
    "กรกฎาคม": 7, "ก.ค.": 7,
    "สิงหาคม": 8, "ส.ค.": 8,
    "กันยายน": 9, "ก.ย.": 9,
    "ตุลาคม": 10, "ต.ค.": 10,
    "พฤศจิกายน": 11, "พ.ย.": 11,
    "ธันวาคม": 12, "ธ.ค.": 12,
}

# Known misspellings in the source listings.
_SPELLING_FIXES = [
    ("กรกฏาคม", "กรกฎาคม"),
    ("กรกฎาค ม", "กรกฎาคม "),
]

_FULL_NAMES = "|".join(name for name in MONTHS if not name.endswith("."))

# Full names must be in MONTHS. Any "x.y." abbreviation matches, so a
# misspelled one raises UnknownMonth instead of being skipped.
_DATE_RE = re.compile(
    r"([0-9]+)\s+"
    rf"({_FULL_NAMES}|(?!พ\.ศ\.)[ก-๙]{{1,2}}\.[ก-๙]\.)\s+"
    r"(พ\.ศ\.\s*)?"
    r"([0-9]+)"
)


def to_arabic_digits(text: str) -> str:
    return text.translate(_THAI_DIGITS)


def extract_dates(text: str) -> Iterator[str]:
    """Yield ISO dates for every ``<day> <month> [พ.ศ.] <year>`` in text order.

    Thai digits must already be converted with :func:`to_arabic_digits`.
    """
    for wrong, right in _SPELLING_FIXES:
        text = text.replace(wrong, right)

    for match in _DATE_RE.finditer(text):
        day, month_name, _, year = match.groups()
        month = MONTHS.get(month_name)
        if month is None:
            raise UnknownMonth(f"month not found: {month_name}")
        gregorian = int(year) - BUDDHIST_ERA_OFFSET
        yield f"{gregorian}-{month:02d}-{int(day):02d}"


def first_date(text: str):
    """Return the first ISO date in text, or None."""
    return next(extract_dates(text), None)
