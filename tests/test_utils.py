"""Naming, path resolution and URL helpers."""

from datetime import date
from pathlib import Path

import pytest

from opr_data.armybooks.utils import (
    build_preview_url,
    build_selection_url,
    entry_from_url,
    extract_id_param,
    format_run_date,
    resolve_directory,
    resolve_file,
    sanitize_filename,
    target_exists,
)
from opr_data.error_handling import FilesystemError
from opr_data.models import ProductLine, SelectionEntry

FIREFIGHT = ProductLine(identifier=3, name="Grimdark Future Firefight")
FTL = ProductLine(identifier=None, name="Warfleets FTL", uses_alternate_id_param=True)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Orcs", "Orcs"),
        ("  Orcs  ", "Orcs"),
        ("Battle Brothers: Blood Prime", "Battle Brothers- Blood Prime"),
        ('a/b\\c?d%e*f:g|h"i<j>k', "a-b-c-d-e-f-g-h-i-j-k"),
        ("", ""),
        ("   ", ""),
    ],
)
def test_sanitize_filename(raw: str, expected: str) -> None:
    assert sanitize_filename(raw) == expected


def test_sanitize_filename_is_idempotent_for_typical_names() -> None:
    for name in ["Alien Hives", " Dwarves: Guilds ", "Rebel / Guerrillas", "High Elf Fleets?"]:
        once = sanitize_filename(name)
        assert sanitize_filename(once) == once


def test_format_run_date() -> None:
    assert format_run_date(date(2024, 6, 1)) == "2024-06-01"


def test_resolve_directory_creates_once(tmp_path: Path) -> None:
    first = resolve_directory(tmp_path, "Grimdark Future Firefight", "2024-06-01")
    second = resolve_directory(tmp_path, "Grimdark Future Firefight", "2024-06-01")
    assert first == second == tmp_path / "Grimdark Future Firefight - 2024-06-01"
    assert first.is_dir()


def test_resolve_directory_sanitizes_line_name(tmp_path: Path) -> None:
    directory = resolve_directory(tmp_path, "Age of Fantasy: Regiments", "2024-06-01")
    assert directory.name == "Age of Fantasy- Regiments - 2024-06-01"


def test_resolve_directory_reports_filesystem_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    with pytest.raises(FilesystemError):
        resolve_directory(blocker, "Grimdark Future", "2024-06-01")


def test_resolve_file_for_army_book(tmp_path: Path) -> None:
    directory = resolve_directory(tmp_path, FIREFIGHT.name, "2024-06-01")
    target = resolve_file(directory, "Orcs", "2024-06-01")
    assert target.file_name == "Orcs - 2024-06-01.pdf"
    assert target.full_path.relative_to(tmp_path) == Path(
        "Grimdark Future Firefight - 2024-06-01/Orcs - 2024-06-01.pdf"
    )
    assert not target_exists(target.full_path)
    target.full_path.write_bytes(b"%PDF")
    assert target_exists(target.full_path)


def test_resolve_file_for_catalog_document(tmp_path: Path) -> None:
    target = resolve_file(tmp_path, "GF - Core Rules v3.4")
    assert target.file_name == "GF - Core Rules v3.4.pdf"


def test_build_selection_url() -> None:
    assert build_selection_url(FIREFIGHT) == "https://army-forge.onepagerules.com/armyBookSelection?gameSystem=3"
    assert build_selection_url(FTL) == "https://army-forge.onepagerules.com/ftl/fleetSelection"


def test_build_preview_url() -> None:
    entry = SelectionEntry(display_name="Orcs", identifier="42")
    assert build_preview_url(entry, FIREFIGHT) == (
        "https://army-forge-studio.onepagerules.com/army-books/view/42~3/preview"
    )
    assert build_preview_url(entry, FTL) == (
        "https://army-forge-studio.onepagerules.com/army-books/view/42~6/preview"
    )


@pytest.mark.parametrize(
    "href, param, expected",
    [
        ("/armyBookSelection?armyId=z65fgu0l29i4lnlu&gameSystem=2", "armyId", "z65fgu0l29i4lnlu"),
        ("https://army-forge.onepagerules.com/list?gameSystem=2&armyId=a_b-c", "armyId", "a_b-c"),
        ("/ftl/fleet?fleetId=xyz", "fleetId", "xyz"),
        ("/ftl/fleet?fleetId=xyz", "armyId", None),
        ("/armyBookSelection?gameSystem=2", "armyId", None),
        ("", "armyId", None),
    ],
)
def test_extract_id_param(href: str, param: str, expected) -> None:
    assert extract_id_param(href, param) == expected


def test_entry_from_url_direct_navigation() -> None:
    entry = entry_from_url("https://army-forge.onepagerules.com/preview?armyId=42&armyName=Orcs", "armyId")
    assert entry == SelectionEntry(display_name="Orcs", identifier="42")


def test_entry_from_url_fleet_names() -> None:
    entry = entry_from_url("https://army-forge.onepagerules.com/ftl/list?fleetId=7&fleetName=Star%20Hosts", "fleetId")
    assert entry == SelectionEntry(display_name="Star Hosts", identifier="7")


@pytest.mark.parametrize(
    "url",
    [
        "https://army-forge.onepagerules.com/preview?armyId=42",
        "https://army-forge.onepagerules.com/preview?armyName=Orcs",
        "https://army-forge.onepagerules.com/armyBookSelection?gameSystem=3",
    ],
)
def test_entry_from_url_requires_id_and_name(url: str) -> None:
    assert entry_from_url(url, "armyId") is None
