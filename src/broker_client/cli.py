from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import Any, Callable, Dict, List, Optional

import msgspec

from .client import BrokerClient
from .config import ClientConfig
from .errors import BrokerClientError, UsageError

logger = logging.getLogger(__name__)


def _status(client: BrokerClient, args: argparse.Namespace) -> Any:
    return client.new_health_check_command().send()


def _deploy(client: BrokerClient, args: argparse.Namespace) -> Any:
    first, *rest = args.files
    cmd = client.new_deploy_workflow_command().add_resource_file(first)
    for path in rest:
        cmd = cmd.add_resource_file(path)
    return cmd.send()


def _create_instance(client: BrokerClient, args: argparse.Namespace) -> Any:
    step1 = client.new_create_instance_command()
    if args.workflow_key is not None:
        cmd = step1.workflow_key(args.workflow_key)
    elif args.version is not None:
        cmd = step1.bpmn_process_id(args.bpmn_process_id).version(args.version)
    else:
        cmd = step1.bpmn_process_id(args.bpmn_process_id).latest_version()
    if args.variables:
        cmd = cmd.variables_from_string(args.variables)
    return cmd.send()


def _cancel_instance(client: BrokerClient, args: argparse.Namespace) -> Any:
    return client.new_cancel_instance_command().workflow_instance_key(args.key).send()


def _publish_message(client: BrokerClient, args: argparse.Namespace) -> Any:
    cmd = (
        client.new_publish_message_command()
        .message_name(args.name)
        .correlation_key(args.correlation_key)
        .time_to_live(args.ttl_ms)
    )
    if args.message_id:
        cmd = cmd.message_id(args.message_id)
    if args.variables:
        cmd = cmd.variables_from_string(args.variables)
    return cmd.send()


def _create_job(client: BrokerClient, args: argparse.Namespace) -> Any:
    cmd = client.new_create_job_command().job_type(args.job_type).variables_from_string(args.variables)
    if args.retries is not None:
        cmd = cmd.retries(args.retries)
    for header in args.header or []:
        key, sep, value = header.partition("=")
        if not sep:
            raise UsageError(f"invalid --header {header!r}, expected KEY=VALUE")
        cmd = cmd.add_custom_header(key, value)
    return cmd.send()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="brokerctl", description="Send commands to a workflow broker gateway.")
    ap.add_argument("--address", default=None, help="gateway host:port (default: $BROKER_ADDRESS or 127.0.0.1:26500)")
    ap.add_argument("--config", default=None, help="TOML file with a [client] table")
    ap.add_argument("--tls", action="store_true", default=None, help="connect with TLS")
    ap.add_argument("--timeout", type=float, default=None, help="request timeout in seconds")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("status", help="show cluster topology")
    p.set_defaults(func=_status)

    p = sub.add_parser("deploy", help="deploy workflow resources")
    p.add_argument("files", nargs="+")
    p.set_defaults(func=_deploy)

    p = sub.add_parser("create-instance", help="create a workflow instance")
    which = p.add_mutually_exclusive_group(required=True)
    which.add_argument("--bpmn-process-id")
    which.add_argument("--workflow-key", type=int)
    p.add_argument("--version", type=int, default=None, help="workflow version (default: latest)")
    p.add_argument("--variables", default=None, help="JSON object")
    p.set_defaults(func=_create_instance)

    p = sub.add_parser("cancel-instance", help="cancel a workflow instance")
    p.add_argument("key", type=int)
    p.set_defaults(func=_cancel_instance)

    p = sub.add_parser("publish-message", help="publish a message")
    p.add_argument("name")
    p.add_argument("--correlation-key", required=True)
    p.add_argument("--ttl-ms", type=int, default=0)
    p.add_argument("--message-id", default=None)
    p.add_argument("--variables", default=None, help="JSON object")
    p.set_defaults(func=_publish_message)

    p = sub.add_parser("create-job", help="create a standalone job")
    p.add_argument("job_type")
    p.add_argument("--variables", required=True, help="JSON object")
    p.add_argument("--retries", type=int, default=None)
    p.add_argument("--header", action="append", help="custom header KEY=VALUE (repeatable)")
    p.set_defaults(func=_create_job)
    return ap


def _load_config(args: argparse.Namespace) -> ClientConfig:
    base = ClientConfig.from_toml(args.config) if args.config else ClientConfig.from_env()
    overrides: Dict[str, Any] = {}
    if args.address:
        overrides["gateway_address"] = args.address
    if args.tls:
        overrides["use_tls"] = True
    if args.timeout is not None:
        overrides["request_timeout_s"] = args.timeout
    return dataclasses.replace(base, **overrides) if overrides else base


def main(argv: Optional[List[str]] = None, *, client_factory: Callable[[ClientConfig], BrokerClient] = BrokerClient) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if args.command == "create-instance" and args.workflow_key is not None and args.version is not None:
        ap.error("--version only applies to --bpmn-process-id")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = _load_config(args)
    except (OSError, ValueError) as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 2
    logger.debug(f"brokerctl {args.command} against {config.gateway_address}")

    try:
        client = client_factory(config)
    except OSError as e:
        print(f"error: cannot set up client: {e}", file=sys.stderr)
        return 2

    try:
        with client:
            result = args.func(client, args)
    except UsageError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except BrokerClientError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(msgspec.json.format(msgspec.json.encode(result), indent=2).decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
