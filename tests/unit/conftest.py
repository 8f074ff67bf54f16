#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

# This allows exceptions to be handled by IDEs (rather than just printing the results)
# when pytest based tests are being run from inside the IDE
# To enable this, set `_PYTEST_RAISE` to some value != '0' in your IDE
PYTEST_RAISE = os.getenv("_PYTEST_RAISE", "0") != "0"


@pytest.hookimpl(tryfirst=True)
def pytest_exception_interact(call: pytest.CallInfo) -> None:
    if PYTEST_RAISE and (excinfo := call.excinfo):
        raise excinfo.value


@pytest.fixture(name="password_store_file")
def fixture_password_store_file(tmp_path: Path) -> Iterator[Path]:
    file = tmp_path / "stored_passwords"
    file.write_text("couchdb:s3cr3t:with:colons\nother:nope\n", encoding="utf-8")
    yield file
