#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from couchdb_replication.models import State


class ReplicationCheckError(Exception):
    """Base of all errors that end the check with a verdict of their own"""

    state = State.UNKNOWN

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)

    def __str__(self) -> str:
        return self.reason


class ConfigError(ReplicationCheckError):
    state = State.UNKNOWN


class MissingCredentialsError(ConfigError):
    pass


class TransportError(ReplicationCheckError):
    state = State.CRIT


class AuthorizationError(ReplicationCheckError):
    state = State.CRIT


class NotFoundError(ReplicationCheckError):
    state = State.CRIT


class MalformedResponseError(ReplicationCheckError):
    state = State.UNKNOWN
