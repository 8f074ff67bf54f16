#!/usr/bin/env python3
# Copyright (C) 2026 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""check_couchdb_replication - Monitor the replications of a CouchDB cluster"""

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import NoReturn

import requests
from pydantic import BaseModel

from couchdb_replication import password_store
from couchdb_replication.classifier import check_credentials, ErrorKind, make_error
from couchdb_replication.client import CouchDBClient, ReplicationAPI
from couchdb_replication.exceptions import ConfigError, ReplicationCheckError
from couchdb_replication.models import AggregateVerdict, State
from couchdb_replication.replication import (
    aggregate_all,
    discover,
    discovery_verdict,
    evaluate,
    single_verdict,
)
from couchdb_replication.verdict import emit, from_error, output_check_result

ALL_REPLICATIONS = "ALL"


class _ArgumentParser(argparse.ArgumentParser):
    # argparse exits with 2 on bad arguments, which means CRIT to the monitoring core
    def error(self, message: str) -> NoReturn:
        raise ConfigError(message)


class Args(BaseModel, frozen=True):
    host: None | str
    port: int
    use_tls: bool
    user: None | str
    secret: None | str
    secret_reference: None | str
    replication: None | str
    discover: bool
    include_one_time: bool
    timeout: float
    no_cert_check: bool
    verbose: int
    debug: bool
    help: bool

    @property
    def ignore_one_time(self) -> bool:
        return not self.include_one_time

    def resolve_secret(self) -> None | str:
        if self.secret is not None:
            return self.secret
        if self.secret_reference is not None:
            try:
                ident, file = password_store.parse_reference(self.secret_reference)
                return password_store.lookup(file, ident)
            except (ValueError, KeyError, OSError) as e:
                raise ConfigError(f"Cannot read password from store: {e}") from e
        return None

    def credentials(self) -> None | tuple[str, str]:
        secret = self.resolve_secret()
        if check_credentials(self.user, secret) is ErrorKind.MISSING_CREDENTIALS:
            raise make_error(ErrorKind.MISSING_CREDENTIALS, subject="Credentials", user=self.user)
        if self.user and secret:
            return self.user, secret
        return None


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid number: '{value}'") from e
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: '{value}'")
    return number


def _create_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="check_couchdb_replication",
        description=__doc__,
        add_help=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="Show this help and exit")
    parser.add_argument(
        "-H", dest="host", default=None, help="Host name or IP address of the CouchDB node"
    )
    parser.add_argument(
        "-P", dest="port", type=int, default=5984, help="Port of the CouchDB API (default: 5984)"
    )
    parser.add_argument("-S", dest="use_tls", action="store_true", help="Use https")
    parser.add_argument("-u", dest="user", default=None, help="Username for authentication")

    group = parser.add_mutually_exclusive_group()
    group.add_argument("-p", dest="secret", default=None, help="Password for authentication")
    group.add_argument(
        "--secret-reference",
        default=None,
        help="Password store reference (ID:FILE) to the password for authentication",
    )

    parser.add_argument(
        "-r",
        dest="replication",
        metavar="ID",
        default=None,
        help=f"Replication ID (doc_id) to check, '{ALL_REPLICATIONS}' checks every replication",
    )
    parser.add_argument(
        "-d",
        dest="discover",
        action="store_true",
        help="Detect and list all active replications",
    )
    parser.add_argument(
        "-i",
        dest="include_one_time",
        action="store_true",
        help="Also report one-time replications that are not running "
        f"(only with -r {ALL_REPLICATIONS})",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=_positive_float,
        default=10.0,
        help="Timeout for every API call in seconds (default: 10)",
    )
    parser.add_argument(
        "-k", "--no-cert-check", action="store_true", help="Disable certificate verification"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Verbose mode (for even more output use -vv)",
    )
    parser.add_argument("--debug", action="store_true", help="Raise python exceptions")
    return parser


def parse_arguments(argv: Sequence[str]) -> Args:
    args = Args.model_validate(vars(_create_parser().parse_args(argv)))
    if args.help:
        return args
    if not args.host:
        raise ConfigError("Missing host (-H)")
    if args.replication is None and not args.discover:
        raise ConfigError("Either a replication (-r) or discovery (-d) is required")
    if args.replication is not None and args.discover:
        raise ConfigError("Replication (-r) and discovery (-d) cannot be combined")
    return args


def set_up_logging(verbosity: int) -> None:
    fmt = "%(levelname)s: %(message)s"
    if verbosity >= 2:
        fmt = "%(levelname)s: %(name)s: %(filename)s: %(lineno)s %(message)s"
        lvl = logging.DEBUG
    else:
        lvl = logging.INFO if verbosity else logging.WARNING

    logging.basicConfig(level=lvl, format=fmt, stream=sys.stderr)


def check_replications(api: ReplicationAPI, args: Args) -> AggregateVerdict:
    if args.discover:
        return discovery_verdict(discover(api))
    assert args.replication is not None
    if args.replication == ALL_REPLICATIONS:
        return aggregate_all(api, args.ignore_one_time)
    return single_verdict(evaluate(api, args.replication))


def _check_couchdb_replication_main(
    args: Args, session: requests.Session | None
) -> AggregateVerdict:
    assert args.host is not None
    try:
        credentials = args.credentials()
        with CouchDBClient(
            host=args.host,
            port=args.port,
            use_tls=args.use_tls,
            timeout=args.timeout,
            credentials=credentials,
            verify=not args.no_cert_check,
            session=session,
        ) as client:
            return check_replications(client, args)
    except ReplicationCheckError as e:
        if args.debug:
            raise
        return from_error(e)
    except Exception as e:
        if args.debug:
            raise
        return AggregateVerdict(State.CRIT, f"Unhandled exception: {e}")


def main(
    argv: Sequence[str] | None = None,
    session: requests.Session | None = None,
) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = _create_parser()
    if not argv:
        parser.print_help()
        return int(State.UNKNOWN)

    try:
        args = parse_arguments(argv)
    except ConfigError as e:
        exitcode, line = emit(from_error(e))
        output_check_result(line)
        return exitcode

    if args.help:
        parser.print_help()
        return int(State.UNKNOWN)

    set_up_logging(args.verbose)
    exitcode, line = emit(_check_couchdb_replication_main(args, session))
    output_check_result(line)
    return exitcode


if __name__ == "__main__":
    sys.exit(main())
