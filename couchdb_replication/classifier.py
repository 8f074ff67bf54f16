#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Classification of CouchDB responses

Every response is classified before its payload is trusted. CouchDB reports
errors as JSON documents like ``{"error": "not_found", "reason": "missing"}``,
so we decode first and look at the ``error`` member. Only bodies that are not
JSON at all (proxies, load balancers, ...) are matched against the signature
table.
"""

import enum
import json
import logging
from collections.abc import Mapping, Sequence
from typing import Final, TypeVar

import pydantic

from couchdb_replication.exceptions import (
    AuthorizationError,
    MalformedResponseError,
    MissingCredentialsError,
    NotFoundError,
    ReplicationCheckError,
    TransportError,
)
from couchdb_replication.models import QueryResult

LOGGER = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    MISSING_CREDENTIALS = "missing_credentials"
    AUTH_FAILURE = "auth_failure"
    NOT_ADMIN = "not_admin"
    NOT_FOUND = "not_found"
    CONNECTIVITY_FAILURE = "connectivity_failure"
    NONE = "none"


# Order matters: the first matching entry wins
_SIGNATURES: Final[Sequence[tuple[ErrorKind, Sequence[str]]]] = (
    (ErrorKind.AUTH_FAILURE, ("unauthorized", "name or password is incorrect")),
    (ErrorKind.NOT_ADMIN, ("not a server admin",)),
    (ErrorKind.NOT_FOUND, ("not_found", "missing")),
)

_STRUCTURED_ERRORS: Final[Mapping[str, ErrorKind]] = {
    "unauthorized": ErrorKind.AUTH_FAILURE,
    "forbidden": ErrorKind.NOT_ADMIN,
    "not_found": ErrorKind.NOT_FOUND,
}

_ModelT = TypeVar("_ModelT", bound=pydantic.BaseModel)


def check_credentials(user: str | None, password: str | None) -> ErrorKind:
    """
    >>> check_credentials("admin", None)
    <ErrorKind.MISSING_CREDENTIALS: 'missing_credentials'>
    >>> check_credentials(None, None)
    <ErrorKind.NONE: 'none'>
    """
    if bool(user) != bool(password):
        return ErrorKind.MISSING_CREDENTIALS
    return ErrorKind.NONE


def classify(query_success: bool, body: str) -> ErrorKind:
    """
    >>> classify(True, '{"error": "not_found", "reason": "missing"}')
    <ErrorKind.NOT_FOUND: 'not_found'>
    >>> classify(True, '{"state": "running", "info": "missing nothing"}')
    <ErrorKind.NONE: 'none'>
    >>> classify(True, '<html>401 Unauthorized</html>')
    <ErrorKind.AUTH_FAILURE: 'auth_failure'>
    >>> classify(False, "")
    <ErrorKind.CONNECTIVITY_FAILURE: 'connectivity_failure'>
    """
    if not query_success or not body.strip():
        return ErrorKind.CONNECTIVITY_FAILURE

    try:
        document = json.loads(body)
    except ValueError:
        return _classify_signatures(body)

    if isinstance(document, dict) and "error" in document:
        return _classify_error_document(document)
    return ErrorKind.NONE


def _classify_error_document(document: Mapping[str, object]) -> ErrorKind:
    error = str(document.get("error", "")).lower()
    reason = str(document.get("reason", "")).lower()

    if error == "unauthorized" and "server admin" in reason:
        return ErrorKind.NOT_ADMIN
    # An error we do not know still means the server did not answer our query
    return _STRUCTURED_ERRORS.get(error, ErrorKind.CONNECTIVITY_FAILURE)


def _classify_signatures(body: str) -> ErrorKind:
    lowered = body.lower()
    for kind, signatures in _SIGNATURES:
        if any(signature in lowered for signature in signatures):
            return kind
    return ErrorKind.NONE


def make_error(kind: ErrorKind, *, subject: str, user: str | None) -> ReplicationCheckError:
    """Create the exception reporting a classified failure

    >>> str(make_error(ErrorKind.NOT_FOUND, subject="Replication repA", user=None))
    'Replication repA not found'
    """
    match kind:
        case ErrorKind.MISSING_CREDENTIALS:
            return MissingCredentialsError(
                "Authentication required but missing password" if user else "Missing username"
            )
        case ErrorKind.AUTH_FAILURE:
            return AuthorizationError(
                f"Unable to authenticate user {user}"
                if user
                else "Unable to authenticate, no credentials given"
            )
        case ErrorKind.NOT_ADMIN:
            return AuthorizationError(
                f"User {user} is not a server admin"
                if user
                else "Anonymous user is not a server admin"
            )
        case ErrorKind.NOT_FOUND:
            return NotFoundError(f"{subject} not found")
        case ErrorKind.CONNECTIVITY_FAILURE:
            return TransportError(f"{subject} could not be queried")
    raise ValueError(f"not an error: {kind}")


def decode(
    result: QueryResult,
    model: type[_ModelT],
    *,
    subject: str,
    user: str | None,
) -> _ModelT:
    """Classify a query result and validate its payload against ``model``"""
    if (kind := classify(result.success, result.body)) is not ErrorKind.NONE:
        LOGGER.debug("%s: classified as %s (HTTP %s)", subject, kind.value, result.status_code)
        raise make_error(kind, subject=subject, user=user)

    try:
        return model.model_validate_json(result.body)
    except pydantic.ValidationError as e:
        LOGGER.debug("%s: invalid document: %s", subject, e)
        raise MalformedResponseError(f"{subject}: invalid response") from e
