#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import sys

from couchdb_replication.exceptions import ReplicationCheckError
from couchdb_replication.models import AggregateVerdict

OUTPUT_PREFIX = "REPLICATION"


def from_error(error: ReplicationCheckError) -> AggregateVerdict:
    return AggregateVerdict(error.state, error.reason)


def emit(verdict: AggregateVerdict) -> tuple[int, str]:
    """
    >>> from couchdb_replication.models import State
    >>> emit(AggregateVerdict(State.WARN, "no replications found"))
    (1, 'REPLICATION WARNING - no replications found')
    """
    return int(verdict.state), f"{OUTPUT_PREFIX} {verdict.state.label} - {verdict.summary}"


def output_check_result(s: str) -> None:
    sys.stdout.write("%s\n" % s)
