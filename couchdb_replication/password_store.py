#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Access to passwords kept in a password store file

The file contains one ``ident:password`` entry per line. Active checks get a
reference of the form ``ident:path`` instead of the password itself, so the
secret does not show up in the process list.
"""

from pathlib import Path


def load(file: Path) -> dict[str, str]:
    passwords = {}
    with file.open(encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            ident, password = line.rstrip("\n").split(":", 1)
            passwords[ident] = password
    return passwords


def lookup(file: Path, ident: str) -> str:
    try:
        return load(file)[ident]
    except KeyError:
        raise KeyError(f"Password '{ident}' does not exist in {file}") from None


def parse_reference(reference: str) -> tuple[str, Path]:
    """
    >>> parse_reference("couchdb:/omd/sites/mysite/var/check_mk/stored_passwords")
    ('couchdb', PosixPath('/omd/sites/mysite/var/check_mk/stored_passwords'))
    """
    ident, file = reference.split(":", 1)
    return ident, Path(file)
