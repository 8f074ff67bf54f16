#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Types shared by the replication check

The dataclasses are what the check works with, the pydantic models describe
the documents returned by the CouchDB HTTP API. Only the fields we evaluate are
declared, everything else in the responses is ignored.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

import pydantic


class State(enum.IntEnum):
    OK = 0
    WARN = 1
    CRIT = 2
    UNKNOWN = 3

    @property
    def label(self) -> str:
        """
        >>> State.WARN.label
        'WARNING'
        """
        return _STATE_LABELS[self]


_STATE_LABELS = {
    State.OK: "OK",
    State.WARN: "WARNING",
    State.CRIT: "CRITICAL",
    State.UNKNOWN: "UNKNOWN",
}


class ReplicationMode(enum.Enum):
    CONTINUOUS = "continuous"
    ONE_TIME = "one_time"


class ReplicationState(enum.Enum):
    RUNNING = "running"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class QueryResult:
    success: bool
    body: str
    status_code: int | None = None


@dataclass(frozen=True)
class ReplicationTarget:
    id: str
    source_label: str | None = None

    def render(self) -> str:
        """
        >>> ReplicationTarget("repA", "db1").render()
        'repA (db1)'
        >>> ReplicationTarget("repA").render()
        'repA'
        """
        return self.id if self.source_label is None else f"{self.id} ({self.source_label})"


@dataclass(frozen=True)
class ReplicationStatus:
    target: ReplicationTarget
    state: ReplicationState
    error_count: int
    raw_state_label: str
    # set when the definition could not be looked up to tell continuous from one-time
    unresolved: bool = False

    @property
    def is_running(self) -> bool:
        return self.state is ReplicationState.RUNNING

    def render_details(self) -> str:
        """
        >>> status = ReplicationStatus(
        ...     ReplicationTarget("repA"), ReplicationState.UNKNOWN, 2, "error", unresolved=True
        ... )
        >>> status.render_details()
        'repA (state: error, continuous: unknown, error count: 2)'
        """
        mode = ", continuous: unknown" if self.unresolved else ""
        return (
            f"{self.target.id} (state: {self.raw_state_label}{mode},"
            f" error count: {self.error_count})"
        )


@dataclass(frozen=True)
class AggregateVerdict:
    state: State
    summary: str
    included: Sequence[ReplicationStatus] = ()


class ActiveTask(pydantic.BaseModel, frozen=True):
    type: str
    doc_id: str | None = None
    source: str | None = None


class SchedulerDoc(pydantic.BaseModel, frozen=True):
    doc_id: str
    state: str | None = None
    error_count: int = pydantic.Field(default=0, ge=0)
    source: str | None = None


class SchedulerDocs(pydantic.BaseModel, frozen=True):
    docs: Sequence[SchedulerDoc]


class ReplicatorDoc(pydantic.BaseModel, frozen=True):
    continuous: bool = False

    @property
    def mode(self) -> ReplicationMode:
        return ReplicationMode.CONTINUOUS if self.continuous else ReplicationMode.ONE_TIME


class ActiveTasks(pydantic.RootModel[Sequence[ActiveTask]]):
    pass
