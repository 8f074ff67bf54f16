#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Evaluation of CouchDB replications

Three ways of looking at the replication scheduler are offered:

* discovery lists the replications that are currently active,
* a single replication is checked by its document id,
* all replications known to the scheduler are checked at once.

None of the functions below keep state between calls. They take the API to
query and return new objects, evaluating the same remote state twice yields
the same verdict.
"""

import dataclasses
import logging
from collections.abc import Callable, Iterable, Sequence

from couchdb_replication.classifier import decode
from couchdb_replication.client import (
    ACTIVE_TASKS,
    replicator_doc_path,
    ReplicationAPI,
    SCHEDULER_DOCS,
    scheduler_doc_path,
)
from couchdb_replication.exceptions import (
    MalformedResponseError,
    NotFoundError,
    TransportError,
)
from couchdb_replication.models import (
    ActiveTasks,
    AggregateVerdict,
    ReplicationMode,
    ReplicationState,
    ReplicationStatus,
    ReplicationTarget,
    ReplicatorDoc,
    SchedulerDoc,
    SchedulerDocs,
    State,
)

LOGGER = logging.getLogger(__name__)

_RUNNING = "running"


def discover(api: ReplicationAPI) -> Sequence[ReplicationTarget]:
    tasks = decode(api.get(ACTIVE_TASKS), ActiveTasks, subject="Active tasks", user=api.user)
    return [
        ReplicationTarget(task.doc_id, task.source)
        for task in tasks.root
        if task.type == "replication" and task.doc_id is not None
    ]


def discovery_verdict(targets: Sequence[ReplicationTarget]) -> AggregateVerdict:
    if not targets:
        return AggregateVerdict(State.WARN, "no replications found")
    return AggregateVerdict(State.OK, " ".join(target.render() for target in targets))


def status_from_doc(doc: SchedulerDoc) -> ReplicationStatus:
    """
    >>> status_from_doc(SchedulerDoc(doc_id="repA", state="crashing", error_count=4)).state
    <ReplicationState.FAILED: 'failed'>
    """
    if doc.state is None:
        state, label = ReplicationState.UNKNOWN, "unknown"
    else:
        state = ReplicationState.RUNNING if doc.state == _RUNNING else ReplicationState.FAILED
        label = doc.state
    return ReplicationStatus(
        target=ReplicationTarget(doc.doc_id, doc.source),
        state=state,
        error_count=doc.error_count,
        raw_state_label=label,
    )


def evaluate(api: ReplicationAPI, replication_id: str) -> ReplicationStatus:
    doc = decode(
        api.get(scheduler_doc_path(replication_id)),
        SchedulerDoc,
        subject=f"Replication {replication_id}",
        user=api.user,
    )
    return status_from_doc(doc)


def single_verdict(status: ReplicationStatus) -> AggregateVerdict:
    return AggregateVerdict(
        State.OK if status.is_running else State.CRIT,
        f"Replication {status.target.id} is {status.raw_state_label}",
        (status,),
    )


def fetch_all(api: ReplicationAPI) -> Sequence[ReplicationStatus]:
    docs = decode(
        api.get(SCHEDULER_DOCS), SchedulerDocs, subject="Replication scheduler", user=api.user
    )
    return [status_from_doc(doc) for doc in docs.docs]


def fetch_mode(api: ReplicationAPI, replication_id: str) -> ReplicationMode:
    return decode(
        api.get(replicator_doc_path(replication_id)),
        ReplicatorDoc,
        subject=f"Definition of replication {replication_id}",
        user=api.user,
    ).mode


def resolve_failure(
    api: ReplicationAPI, status: ReplicationStatus, ignore_one_time: bool
) -> ReplicationStatus | None:
    """Return the status to report as failure, None if it does not count

    A replication whose definition cannot be looked up is reported with an
    unknown state instead of being dropped. Authentication problems still end
    the whole check.
    """
    if status.is_running:
        return None
    if not ignore_one_time:
        return status

    try:
        mode = fetch_mode(api, status.target.id)
    except (NotFoundError, TransportError, MalformedResponseError) as e:
        LOGGER.warning("Counting %s as failed: %s", status.target.id, e)
        return dataclasses.replace(status, state=ReplicationState.UNKNOWN, unresolved=True)

    if mode is ReplicationMode.ONE_TIME:
        LOGGER.info("Ignoring one-time replication %s", status.target.id)
        return None
    return status


def should_count_as_failure(
    api: ReplicationAPI, status: ReplicationStatus, ignore_one_time: bool
) -> bool:
    return resolve_failure(api, status, ignore_one_time) is not None


def aggregate(
    statuses: Iterable[ReplicationStatus],
    resolve: Callable[[ReplicationStatus], ReplicationStatus | None],
) -> AggregateVerdict:
    statuses = list(statuses)
    running = [status for status in statuses if status.is_running]
    failed = [
        resolved
        for status in statuses
        if not status.is_running and (resolved := resolve(status)) is not None
    ]

    if not failed:
        return AggregateVerdict(
            State.OK, f"All {len(running)} continuous replications running", tuple(running)
        )

    return AggregateVerdict(
        State.CRIT,
        f"{len(failed)} continuous replications not running - Details: "
        + " ".join(status.render_details() for status in failed),
        tuple(failed),
    )


def aggregate_all(api: ReplicationAPI, ignore_one_time: bool) -> AggregateVerdict:
    return aggregate(
        fetch_all(api),
        lambda status: resolve_failure(api, status, ignore_one_time),
    )
