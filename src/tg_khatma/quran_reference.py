from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from tg_khatma.errors import ReferenceDataError

MUSHAF_PAGES = 604
SURAH_COUNT = 114

# (number, name, ayahs, first page) for the Madani 604-page Mushaf.
_SURAHS: tuple[tuple[int, str, int, int], ...] = (
    (1, "Al-Fatihah", 7, 1),
    (2, "Al-Baqarah", 286, 2),
    (3, "Aal-Imran", 200, 50),
    (4, "An-Nisa", 176, 77),
    (5, "Al-Ma'idah", 120, 106),
    (6, "Al-An'am", 165, 128),
    (7, "Al-A'raf", 206, 151),
    (8, "Al-Anfal", 75, 177),
    (9, "At-Tawbah", 129, 187),
    (10, "Yunus", 109, 208),
    (11, "Hud", 123, 221),
    (12, "Yusuf", 111, 235),
    (13, "Ar-Ra'd", 43, 249),
    (14, "Ibrahim", 52, 255),
    (15, "Al-Hijr", 99, 262),
    (16, "An-Nahl", 128, 267),
    (17, "Al-Isra", 111, 282),
    (18, "Al-Kahf", 110, 293),
    (19, "Maryam", 98, 305),
    (20, "Ta-Ha", 135, 312),
    (21, "Al-Anbiya", 112, 322),
    (22, "Al-Hajj", 78, 332),
    (23, "Al-Mu'minun", 118, 342),
    (24, "An-Nur", 64, 350),
    (25, "Al-Furqan", 77, 359),
    (26, "Ash-Shu'ara", 227, 367),
    (27, "An-Naml", 93, 377),
    (28, "Al-Qasas", 88, 385),
    (29, "Al-Ankabut", 69, 396),
    (30, "Ar-Rum", 60, 404),
    (31, "Luqman", 34, 411),
    (32, "As-Sajdah", 30, 415),
    (33, "Al-Ahzab", 73, 418),
    (34, "Saba", 54, 428),
    (35, "Fatir", 45, 434),
    (36, "Ya-Sin", 83, 440),
    (37, "As-Saffat", 182, 446),
    (38, "Sad", 88, 453),
    (39, "Az-Zumar", 75, 458),
    (40, "Ghafir", 85, 467),
    (41, "Fussilat", 54, 477),
    (42, "Ash-Shura", 53, 483),
    (43, "Az-Zukhruf", 89, 489),
    (44, "Ad-Dukhan", 59, 496),
    (45, "Al-Jathiyah", 37, 499),
    (46, "Al-Ahqaf", 35, 502),
    (47, "Muhammad", 38, 507),
    (48, "Al-Fath", 29, 511),
    (49, "Al-Hujurat", 18, 515),
    (50, "Qaf", 45, 518),
    (51, "Adh-Dhariyat", 60, 520),
    (52, "At-Tur", 49, 523),
    (53, "An-Najm", 62, 526),
    (54, "Al-Qamar", 55, 528),
    (55, "Ar-Rahman", 78, 531),
    (56, "Al-Waqi'ah", 96, 534),
    (57, "Al-Hadid", 29, 537),
    (58, "Al-Mujadila", 22, 542),
    (59, "Al-Hashr", 24, 545),
    (60, "Al-Mumtahanah", 13, 549),
    (61, "As-Saff", 14, 551),
    (62, "Al-Jumu'ah", 11, 553),
    (63, "Al-Munafiqun", 11, 554),
    (64, "At-Taghabun", 18, 556),
    (65, "At-Talaq", 12, 558),
    (66, "At-Tahrim", 12, 560),
    (67, "Al-Mulk", 30, 562),
    (68, "Al-Qalam", 52, 564),
    (69, "Al-Haqqah", 52, 566),
    (70, "Al-Ma'arij", 44, 568),
    (71, "Nuh", 28, 570),
    (72, "Al-Jinn", 28, 572),
    (73, "Al-Muzzammil", 20, 574),
    (74, "Al-Muddaththir", 56, 575),
    (75, "Al-Qiyamah", 40, 577),
    (76, "Al-Insan", 31, 578),
    (77, "Al-Mursalat", 50, 580),
    (78, "An-Naba", 40, 582),
    (79, "An-Nazi'at", 46, 583),
    (80, "Abasa", 42, 585),
    (81, "At-Takwir", 29, 586),
    (82, "Al-Infitar", 19, 587),
    (83, "Al-Mutaffifin", 36, 587),
    (84, "Al-Inshiqaq", 25, 589),
    (85, "Al-Buruj", 22, 590),
    (86, "At-Tariq", 17, 591),
    (87, "Al-A'la", 19, 591),
    (88, "Al-Ghashiyah", 26, 592),
    (89, "Al-Fajr", 30, 593),
    (90, "Al-Balad", 20, 594),
    (91, "Ash-Shams", 15, 595),
    (92, "Al-Layl", 21, 595),
    (93, "Ad-Duha", 11, 596),
    (94, "Ash-Sharh", 8, 596),
    (95, "At-Tin", 8, 597),
    (96, "Al-Alaq", 19, 597),
    (97, "Al-Qadr", 5, 598),
    (98, "Al-Bayyinah", 8, 598),
    (99, "Az-Zalzalah", 8, 599),
    (100, "Al-Adiyat", 11, 599),
    (101, "Al-Qari'ah", 11, 600),
    (102, "At-Takathur", 8, 600),
    (103, "Al-Asr", 3, 601),
    (104, "Al-Humazah", 9, 601),
    (105, "Al-Fil", 5, 601),
    (106, "Quraysh", 4, 602),
    (107, "Al-Ma'un", 7, 602),
    (108, "Al-Kawthar", 3, 602),
    (109, "Al-Kafirun", 6, 603),
    (110, "An-Nasr", 3, 603),
    (111, "Al-Masad", 5, 603),
    (112, "Al-Ikhlas", 4, 604),
    (113, "Al-Falaq", 5, 604),
    (114, "An-Nas", 6, 604),
)


@dataclass(frozen=True)
class Surah:
    number: int
    name: str
    ayahs: int
    start_page: int
    end_page: int


class QuranReference:
    """Read-only surah/page table.

    A surah ends on the page before the next surah starts, unless the next
    surah starts on the same page, in which case both share it.
    """

    def __init__(self, rows: list[tuple[int, str, int, int]], total_pages: int = MUSHAF_PAGES) -> None:
        _check_rows(rows, total_pages)
        self.total_pages = total_pages
        surahs: list[Surah] = []
        for idx, (number, name, ayahs, start) in enumerate(rows):
            if idx + 1 < len(rows):
                next_start = rows[idx + 1][3]
                end = next_start - 1 if next_start > start else start
            else:
                end = total_pages
            surahs.append(Surah(number=number, name=name, ayahs=ayahs, start_page=start, end_page=end))
        self._surahs = tuple(surahs)

    def __len__(self) -> int:
        return len(self._surahs)

    def surahs(self) -> tuple[Surah, ...]:
        return self._surahs

    def surah(self, number: int) -> Surah:
        if not 1 <= number <= len(self._surahs):
            raise KeyError(number)
        return self._surahs[number - 1]

    def ayah_count(self, number: int) -> int:
        return self.surah(number).ayahs

    def page_range(self, number: int) -> tuple[int, int]:
        s = self.surah(number)
        return s.start_page, s.end_page

    def page_to_surah(self, page: int) -> Surah:
        """Return the surah in progress at the top of *page*."""
        return self.surahs_on_page(page)[0]

    def surahs_on_page(self, page: int) -> list[Surah]:
        if not 1 <= page <= self.total_pages:
            raise KeyError(page)
        return [s for s in self._surahs if s.start_page <= page <= s.end_page]

    def pages_for_range(self, surah_from: int, surah_to: int) -> tuple[int, int]:
        first = self.surah(surah_from).start_page
        last = self.surah(surah_to).end_page
        return first, last


def _check_rows(rows: list[tuple[int, str, int, int]], total_pages: int) -> None:
    if total_pages <= 0:
        raise ReferenceDataError("total_pages must be positive")
    if not rows:
        raise ReferenceDataError("reference table is empty")
    previous_start = 0
    for idx, (number, name, ayahs, start) in enumerate(rows, start=1):
        if number != idx:
            raise ReferenceDataError(f"surah numbers must be sequential, got {number} at position {idx}")
        if not name:
            raise ReferenceDataError(f"surah {number} has no name")
        if ayahs <= 0:
            raise ReferenceDataError(f"surah {number} must have at least one ayah")
        if not 1 <= start <= total_pages:
            raise ReferenceDataError(f"surah {number} starts outside 1..{total_pages}")
        if idx == 1 and start != 1:
            raise ReferenceDataError("the first surah must start on page 1")
        if start < previous_start:
            raise ReferenceDataError(f"surah {number} starts before surah {number - 1}")
        previous_start = start


@lru_cache(maxsize=1)
def default_reference() -> QuranReference:
    return QuranReference(list(_SURAHS), total_pages=MUSHAF_PAGES)


def load_reference(path: Path | None) -> QuranReference:
    if path is None or not path.exists():
        return default_reference()

    raw = yaml.safe_load(path.read_text()) or {}
    if not isinstance(raw, dict):
        raise ReferenceDataError(f"{path}: expected a mapping at the top level")
    total_pages = raw.get("total_pages", MUSHAF_PAGES)
    items = raw.get("surahs", [])
    if not isinstance(items, list):
        raise ReferenceDataError(f"{path}: 'surahs' must be a list")

    rows: list[tuple[int, str, int, int]] = []
    for item in items:
        if not isinstance(item, dict):
            raise ReferenceDataError(f"{path}: every surah must be a mapping")
        rows.append(
            (
                _as_int(item, "number"),
                str(item.get("name", "")).strip(),
                _as_int(item, "ayahs"),
                _as_int(item, "start_page"),
            )
        )
    try:
        pages = int(total_pages)
    except (TypeError, ValueError) as exc:
        raise ReferenceDataError(f"{path}: total_pages must be an integer") from exc
    return QuranReference(rows, total_pages=pages)


def _as_int(item: dict[str, Any], key: str) -> int:
    try:
        return int(item[key])
    except KeyError as exc:
        raise ReferenceDataError(f"surah entry is missing '{key}'") from exc
    except (TypeError, ValueError) as exc:
        raise ReferenceDataError(f"surah entry has a non-integer '{key}'") from exc
