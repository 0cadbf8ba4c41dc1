from __future__ import annotations

from pathlib import Path

import pytest

from tg_khatma.errors import ReferenceDataError
from tg_khatma.quran_reference import MUSHAF_PAGES, SURAH_COUNT, QuranReference, default_reference, load_reference


def test_default_table_shape() -> None:
    ref = default_reference()
    assert len(ref) == SURAH_COUNT == 114
    assert ref.total_pages == MUSHAF_PAGES == 604
    assert sum(s.ayahs for s in ref.surahs()) == 6236


def test_surah_lookup_and_ayah_counts() -> None:
    ref = default_reference()
    assert ref.surah(1).name == "Al-Fatihah"
    assert ref.ayah_count(1) == 7
    assert ref.ayah_count(2) == 286
    assert ref.ayah_count(114) == 6
    with pytest.raises(KeyError):
        ref.surah(0)
    with pytest.raises(KeyError):
        ref.surah(115)


@pytest.mark.parametrize(
    "number,expected",
    [
        (1, (1, 1)),
        (2, (2, 49)),
        (3, (50, 76)),
        (113, (604, 604)),
        (114, (604, 604)),
    ],
)
def test_page_ranges(number: int, expected: tuple[int, int]) -> None:
    assert default_reference().page_range(number) == expected


def test_page_to_surah_and_shared_pages() -> None:
    ref = default_reference()
    assert ref.page_to_surah(1).number == 1
    assert ref.page_to_surah(3).number == 2
    assert ref.page_to_surah(50).number == 3
    assert [s.number for s in ref.surahs_on_page(604)] == [112, 113, 114]
    with pytest.raises(KeyError):
        ref.page_to_surah(605)


def test_pages_for_range() -> None:
    assert default_reference().pages_for_range(1, 3) == (1, 76)


def test_load_reference_missing_file_falls_back(tmp_path: Path) -> None:
    assert load_reference(tmp_path / "nope.yaml") is default_reference()
    assert load_reference(None) is default_reference()


def test_load_reference_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "ref.yaml"
    path.write_text(
        "total_pages: 10\n"
        "surahs:\n"
        "  - {number: 1, name: One, ayahs: 7, start_page: 1}\n"
        "  - {number: 2, name: Two, ayahs: 20, start_page: 2}\n"
        "  - {number: 3, name: Three, ayahs: 5, start_page: 9}\n"
    )
    ref = load_reference(path)
    assert len(ref) == 3
    assert ref.total_pages == 10
    assert ref.page_range(2) == (2, 8)
    assert ref.page_range(3) == (9, 10)


@pytest.mark.parametrize(
    "body",
    [
        "- just a list\n",
        "surahs:\n  - {number: 2, name: Two, ayahs: 3, start_page: 1}\n",
        "surahs:\n  - {number: 1, name: One, ayahs: 0, start_page: 1}\n",
        "surahs:\n  - {number: 1, name: One, ayahs: 3, start_page: 2}\n",
        "surahs:\n  - {number: 1, name: One, ayahs: x, start_page: 1}\n",
        "surahs:\n  - {number: 1, name: One, start_page: 1}\n",
        "surahs:\n"
        "  - {number: 1, name: One, ayahs: 3, start_page: 1}\n"
        "  - {number: 2, name: Two, ayahs: 3, start_page: 700}\n",
    ],
)
def test_load_reference_rejects_malformed_tables(tmp_path: Path, body: str) -> None:
    path = tmp_path / "ref.yaml"
    path.write_text(body)
    with pytest.raises(ReferenceDataError):
        load_reference(path)


def test_reference_rejects_decreasing_start_pages() -> None:
    with pytest.raises(ReferenceDataError):
        QuranReference([(1, "One", 3, 1), (2, "Two", 3, 5), (3, "Three", 3, 4)], total_pages=10)
