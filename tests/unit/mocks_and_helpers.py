#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import json
from collections.abc import Mapping
from typing import NamedTuple
from urllib.parse import urlsplit

from couchdb_replication.models import QueryResult

NOT_FOUND = {"error": "not_found", "reason": "missing"}
UNAUTHORIZED = {"error": "unauthorized", "reason": "Name or password is incorrect."}
NOT_ADMIN = {"error": "unauthorized", "reason": "You are not a server admin."}


class FakeResponse(NamedTuple):
    status_code: int
    text: str


def _as_response(answer: object) -> FakeResponse:
    if isinstance(answer, FakeResponse):
        return answer
    if isinstance(answer, str):
        return FakeResponse(200, answer)
    if isinstance(answer, Mapping) and "error" in answer:
        return FakeResponse(404 if answer["error"] == "not_found" else 401, json.dumps(answer))
    return FakeResponse(200, json.dumps(answer))


class FakeSession:
    """Stands in for requests.Session, answering by URL path

    Answers are JSON serializable objects, raw strings, FakeResponse or an
    exception instance to be raised. Unknown paths are answered like CouchDB
    answers a missing document.
    """

    def __init__(self, answers: Mapping[str, object] | None = None) -> None:
        self.answers = dict(answers or {})
        self.requested: list[str] = []
        self.auth: tuple[str, str] | None = None
        self.closed = False

    def get(self, url: str, *, timeout: float, verify: bool) -> FakeResponse:
        path = urlsplit(url).path
        self.requested.append(path)
        answer = self.answers.get(path, NOT_FOUND)
        if isinstance(answer, Exception):
            raise answer
        return _as_response(answer)

    def close(self) -> None:
        self.closed = True


class FakeAPI:
    """ReplicationAPI answering from a mapping, without any HTTP"""

    def __init__(self, answers: Mapping[str, object], user: str | None = None) -> None:
        self.answers = dict(answers)
        self.requested: list[str] = []
        self._user = user

    @property
    def user(self) -> str | None:
        return self._user

    def get(self, path: str) -> QueryResult:
        self.requested.append(path)
        answer = self.answers.get(path, NOT_FOUND)
        if isinstance(answer, QueryResult):
            return answer
        response = _as_response(answer)
        return QueryResult(success=True, body=response.text, status_code=response.status_code)


def scheduler_doc(
    doc_id: str, state: str | None, error_count: int = 0, source: str | None = None
) -> dict[str, object]:
    return {
        "database": "_replicator",
        "doc_id": doc_id,
        "id": f"{doc_id}+continuous",
        "node": "couchdb@127.0.0.1",
        "source": source or f"http://127.0.0.1:5984/{doc_id}_source/",
        "target": f"http://127.0.0.1:5984/{doc_id}_target/",
        "state": state,
        "info": None,
        "error_count": error_count,
        "last_updated": "2026-10-17T08:15:00Z",
        "start_time": "2026-10-16T22:00:00Z",
    }
