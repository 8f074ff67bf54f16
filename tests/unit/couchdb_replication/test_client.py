#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from typing import Any

import pytest
import requests

from tests.unit.mocks_and_helpers import FakeResponse, FakeSession

from couchdb_replication.client import CouchDBClient, replicator_doc_path, scheduler_doc_path
from couchdb_replication.models import QueryResult


def _client(session: Any, **kwargs: Any) -> CouchDBClient:
    return CouchDBClient(
        host=kwargs.get("host", "couch.example.com"),
        port=kwargs.get("port", 5984),
        use_tls=kwargs.get("use_tls", False),
        timeout=kwargs.get("timeout", 10.0),
        credentials=kwargs.get("credentials"),
        verify=kwargs.get("verify", True),
        session=session,
    )


class _RecordingSession(FakeSession):
    def __init__(self) -> None:
        super().__init__({"/_active_tasks": []})
        self.calls: list[tuple[str, float, bool]] = []

    def get(self, url: str, *, timeout: float, verify: bool) -> FakeResponse:
        self.calls.append((url, timeout, verify))
        return super().get(url, timeout=timeout, verify=verify)


def test_paths() -> None:
    assert scheduler_doc_path("repA") == "/_scheduler/docs/_replicator/repA"
    assert replicator_doc_path("rep A") == "/_replicator/rep%20A"


def test_get() -> None:
    session = _RecordingSession()
    result = _client(session, use_tls=True, port=6984, timeout=2.5, verify=False).get(
        "/_active_tasks"
    )
    assert result == QueryResult(success=True, body="[]", status_code=200)
    assert session.calls == [("https://couch.example.com:6984/_active_tasks", 2.5, False)]


def test_credentials_are_passed_verbatim() -> None:
    session = FakeSession()
    client = _client(session, credentials=("admin", "p@ss:word"))
    assert session.auth == ("admin", "p@ss:word")
    assert client.user == "admin"


def test_anonymous() -> None:
    session = FakeSession()
    client = _client(session)
    assert session.auth is None
    assert client.user is None


def test_error_responses_are_returned() -> None:
    session = FakeSession({"/_active_tasks": FakeResponse(500, '{"error":"internal"}')})
    assert _client(session).get("/_active_tasks") == QueryResult(
        success=True, body='{"error":"internal"}', status_code=500
    )


@pytest.mark.parametrize(
    "exception",
    [
        requests.ConnectTimeout("connect timeout"),
        requests.ReadTimeout("read timeout"),
        requests.ConnectionError("connection refused"),
        requests.exceptions.SSLError("certificate verify failed"),
    ],
)
def test_transport_failures(exception: requests.RequestException) -> None:
    session = FakeSession({"/_active_tasks": exception})
    assert _client(session).get("/_active_tasks") == QueryResult(success=False, body="")


def test_context_manager_closes_session() -> None:
    session = FakeSession()
    with _client(session) as client:
        client.get("/_active_tasks")
    assert session.closed


@pytest.mark.parametrize(
    "host, url",
    [
        ("::1", "http://[::1]:5984/_active_tasks"),
        ("2001:db8::10", "http://[2001:db8::10]:5984/_active_tasks"),
        ("127.0.0.1", "http://127.0.0.1:5984/_active_tasks"),
        ("couch", "http://couch:5984/_active_tasks"),
    ],
)
def test_host_in_url(host: str, url: str) -> None:
    session = _RecordingSession()
    _client(session, host=host).get("/_active_tasks")
    assert session.calls == [(url, 10.0, True)]
