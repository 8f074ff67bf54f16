#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from pathlib import Path

import pytest

from couchdb_replication import password_store


def test_load(password_store_file: Path) -> None:
    assert password_store.load(password_store_file) == {
        "couchdb": "s3cr3t:with:colons",
        "other": "nope",
    }


def test_lookup(password_store_file: Path) -> None:
    assert password_store.lookup(password_store_file, "couchdb") == "s3cr3t:with:colons"


def test_lookup_missing(password_store_file: Path) -> None:
    with pytest.raises(KeyError):
        password_store.lookup(password_store_file, "unknown")


def test_parse_reference(tmp_path: Path) -> None:
    assert password_store.parse_reference(f"couchdb:{tmp_path}/pw") == (
        "couchdb",
        tmp_path / "pw",
    )


def test_parse_reference_invalid() -> None:
    with pytest.raises(ValueError):
        password_store.parse_reference("no-separator")
