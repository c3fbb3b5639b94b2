# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 2 — Tabular ingestion tests.
Covers delimiter sniffing, first-column extraction, blank-row skipping,
header handling, byte decoding and the zero-items warning.
"""

import pytest


def test_parse_single_column_lines():
    from app.modules.ingestion.tabular import parse_tabular

    items = parse_tabular("Apple\nBanana\n\n   \nCherry\n")
    assert items == ["Apple", "Banana", "Cherry"]


def test_parse_takes_first_column_and_trims():
    from app.modules.ingestion.tabular import parse_tabular

    items = parse_tabular("  Apple ,red\nBanana,yellow\nCherry,red\n")
    assert items == ["Apple", "Banana", "Cherry"]


def test_parse_semicolon_delimited():
    from app.modules.ingestion.tabular import parse_tabular

    items = parse_tabular("Apple;1\nBanana;2\nCherry;3\n")
    assert items == ["Apple", "Banana", "Cherry"]


def test_parse_tab_delimited():
    from app.modules.ingestion.tabular import parse_tabular

    items = parse_tabular("Apple\t1\nBanana\t2\nCherry\t3\n")
    assert items == ["Apple", "Banana", "Cherry"]


def test_parse_quoted_first_column_keeps_embedded_comma():
    from app.modules.ingestion.tabular import parse_tabular

    items = parse_tabular('"Smith, John",x\n"Doe, Jane",y\n')
    assert items == ["Smith, John", "Doe, Jane"]


def test_parse_skips_rows_with_empty_first_cell():
    from app.modules.ingestion.tabular import parse_tabular

    items = parse_tabular("Apple,1\n,2\nBanana,3\n")
    assert items == ["Apple", "Banana"]


def test_parse_keeps_duplicates_in_order():
    from app.modules.ingestion.tabular import parse_tabular

    assert parse_tabular("B\nA\nB\n") == ["B", "A", "B"]


def test_parse_has_header_drops_first_non_empty_row():
    from app.modules.ingestion.tabular import parse_tabular

    items = parse_tabular("\nName\nApple\nBanana\n", has_header=True)
    assert items == ["Apple", "Banana"]


def test_parse_bytes_with_bom():
    from app.modules.ingestion.tabular import parse_tabular

    data = "Apple\nBanana\n".encode("utf-8-sig")
    assert parse_tabular(data) == ["Apple", "Banana"]


def test_parse_non_utf8_bytes_raises():
    from app.core.errors import IngestionError
    from app.modules.ingestion.tabular import parse_tabular

    with pytest.raises(IngestionError):
        parse_tabular(b"\xff\xfe\xfa\x00bad")


def test_parse_empty_input_raises():
    from app.core.errors import IngestionError
    from app.modules.ingestion.tabular import parse_tabular

    with pytest.raises(IngestionError):
        parse_tabular("")
    with pytest.raises(IngestionError):
        parse_tabular(" \n\n , \n")


def test_parse_header_only_raises():
    from app.core.errors import IngestionError
    from app.modules.ingestion.tabular import parse_tabular

    with pytest.raises(IngestionError):
        parse_tabular("Name\n", has_header=True)


def test_ingestion_error_is_value_error():
    from app.core.errors import IngestionError, ListMatchError

    assert issubclass(IngestionError, ValueError)
    assert issubclass(IngestionError, ListMatchError)
