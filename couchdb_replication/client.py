#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import ipaddress
import logging
from typing import Protocol
from urllib.parse import quote

import requests

from couchdb_replication.models import QueryResult

LOGGER = logging.getLogger(__name__)

ACTIVE_TASKS = "/_active_tasks"
SCHEDULER_DOCS = "/_scheduler/docs/_replicator"
REPLICATOR = "/_replicator"


def scheduler_doc_path(replication_id: str) -> str:
    """
    >>> scheduler_doc_path("my/rep")
    '/_scheduler/docs/_replicator/my%2Frep'
    """
    return f"{SCHEDULER_DOCS}/{quote(replication_id, safe='')}"


def replicator_doc_path(replication_id: str) -> str:
    return f"{REPLICATOR}/{quote(replication_id, safe='')}"


def _url_host(host: str) -> str:
    """
    >>> _url_host("::1")
    '[::1]'
    >>> _url_host("couch.example.com")
    'couch.example.com'
    """
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return host
    return f"[{address}]" if address.version == 6 else host


class ReplicationAPI(Protocol):
    @property
    def user(self) -> str | None: ...

    def get(self, path: str) -> QueryResult: ...


class CouchDBClient:
    """Performs GET requests against one CouchDB node

    Transport problems are not raised but reported as an unsuccessful
    QueryResult, the classifier decides what they mean for the check.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        use_tls: bool,
        timeout: float,
        credentials: tuple[str, str] | None,
        verify: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._verify = verify
        self._user = credentials[0] if credentials else None
        if credentials:
            self._session.auth = credentials
        self._base = f"{'https' if use_tls else 'http'}://{_url_host(host)}:{port}"

    @property
    def user(self) -> str | None:
        return self._user

    def get(self, path: str) -> QueryResult:
        uri = self._base + path
        LOGGER.debug("request GET %r", uri)

        try:
            response = self._session.get(uri, timeout=self._timeout, verify=self._verify)
        except requests.Timeout:
            LOGGER.warning("%r timed out after %s seconds", uri, self._timeout)
            return QueryResult(success=False, body="")
        except requests.RequestException as e:
            LOGGER.warning("%r could not be reached: %s", uri, e)
            return QueryResult(success=False, body="")

        LOGGER.debug("response %s from %r", response.status_code, uri)
        return QueryResult(success=True, body=response.text, status_code=response.status_code)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "CouchDBClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
