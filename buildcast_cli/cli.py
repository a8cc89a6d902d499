"""
buildcast CLI - Main entry point.

Provides a command-line interface for sending build notifications from a CI
job step, checking broker connectivity and validating configuration.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import yaml

from buildcast_mqtt import (
    BuildContext,
    BuildResult,
    BuildSummary,
    ConfigurationError,
    NotificationConfig,
    Qos,
    YamlCredentialStore,
    check_connection,
    create_logger,
    notify,
)


def parse_assignments(values: Optional[Sequence[str]], option: str) -> Dict[str, str]:
    """
    Parse repeated KEY=VALUE arguments into a dict (later wins).

    Raises:
        ValueError: If an argument has no '=' or an empty key
    """
    result: Dict[str, str] = {}
    for item in values or ():
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"{option} expects KEY=VALUE, got {item!r}")
        result[key] = value
    return result


def load_history(history_path: str) -> Tuple[BuildSummary, ...]:
    """
    Load prior builds (newest first) from a YAML list.

    Example YAML:
        - number: 11
          result: FAILURE
          authors: [alice, carol]
        - number: 10
          result: SUCCESS
          authors: [bob]

    Raises:
        FileNotFoundError: If history file doesn't exist
        ValueError: If YAML is invalid
    """
    path = Path(history_path)

    if not path.exists():
        raise FileNotFoundError(f"History file not found: {history_path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or []
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {history_path}: {e}")

    if not isinstance(data, list):
        raise ValueError(f"History file must contain a list: {history_path}")

    return tuple(BuildSummary.from_dict(entry) for entry in data)


def build_context(args: argparse.Namespace) -> BuildContext:
    """Assemble the BuildContext for the notify command."""
    environment: List[Dict[str, str]] = []
    if not args.no_process_env:
        environment.append(dict(os.environ))
    environment.append(parse_assignments(args.env, "--env"))

    history = load_history(args.history) if args.history else ()

    return BuildContext(
        job_name=args.job,
        build_number=args.number,
        result=BuildResult.parse(args.result),
        job_url=args.job_url,
        environment=tuple(environment),
        parameters=(parse_assignments(args.param, "--param"),),
        change_authors=tuple(args.author or ()),
        history=history,
    )


def credential_store(args: argparse.Namespace) -> Optional[YamlCredentialStore]:
    return YamlCredentialStore(Path(args.credentials)) if args.credentials else None


def cmd_notify(args: argparse.Namespace) -> int:
    config = NotificationConfig.from_yaml(Path(args.config))
    context = build_context(args)
    outcome = notify(
        config,
        context,
        create_logger("notifier"),
        credential_lookup=credential_store(args),
    )
    if outcome.delivered:
        print(f"✅ Notification sent to {outcome.topic}")
    else:
        print(f"⚠️  Notification not delivered: {outcome.reason}", file=sys.stderr)
    # Delivery problems never fail the build step
    return 0


def cmd_test_connection(args: argparse.Namespace) -> int:
    config = NotificationConfig.from_yaml(Path(args.config))
    outcome = check_connection(
        config,
        create_logger("cli"),
        credential_lookup=credential_store(args),
    )
    if outcome.delivered:
        print("Success")
        return 0
    print(f"Failed to connect: {outcome.reason}", file=sys.stderr)
    return 1


def cmd_validate(args: argparse.Namespace) -> int:
    config = NotificationConfig.from_yaml(Path(args.config))
    print(f"✅ Configuration valid: broker {config.broker_address()}, "
          f"qos {config.qos_level.name}, topic {config.effective_topic!r}")
    return 0


def cmd_qos_levels(args: argparse.Namespace) -> int:
    for name, value in Qos.choices():
        print(f"{value}  {name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildcast",
        description="buildcast - Publish build results to an MQTT broker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Notify after a build
  buildcast notify notifier.yaml --job demo --number 42 --result SUCCESS

  # With parameters, culprits and credentials
  buildcast notify notifier.yaml --job demo --number 43 --result FAILURE \\
      --param TARGET=prod --author alice --history history.yaml \\
      --credentials credentials.yaml

  # Check broker connectivity
  buildcast test-connection notifier.yaml --credentials credentials.yaml

  # Validate configuration / list QoS levels
  buildcast validate notifier.yaml
  buildcast qos-levels
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # notify command
    notify_cmd = subparsers.add_parser('notify', help='Publish a build notification')
    notify_cmd.add_argument('config', help='Path to notification config YAML')
    notify_cmd.add_argument('--job', required=True, help='Job name (folders separated by /)')
    notify_cmd.add_argument('--number', type=int, required=True, help='Build number')
    notify_cmd.add_argument('--result', default=None,
                            help='Build result (SUCCESS, UNSTABLE, FAILURE, NOT_BUILT, ABORTED)')
    notify_cmd.add_argument('--job-url', default=None,
                            help='Job path override (default: job/<name>/)')
    notify_cmd.add_argument('--param', action='append', metavar='KEY=VALUE',
                            help='Build parameter (repeatable)')
    notify_cmd.add_argument('--env', action='append', metavar='KEY=VALUE',
                            help='Environment variable override (repeatable)')
    notify_cmd.add_argument('--author', action='append', metavar='NAME',
                            help="Author of this build's changes (repeatable)")
    notify_cmd.add_argument('--history', default=None,
                            help='YAML file of prior builds, newest first')
    notify_cmd.add_argument('--credentials', default=None,
                            help='YAML credentials file')
    notify_cmd.add_argument('--no-process-env', action='store_true',
                            help='Do not expose the process environment to templates')
    notify_cmd.set_defaults(handler=cmd_notify)

    # test-connection command
    test_cmd = subparsers.add_parser('test-connection', help='Connect to the broker and disconnect')
    test_cmd.add_argument('config', help='Path to notification config YAML')
    test_cmd.add_argument('--credentials', default=None, help='YAML credentials file')
    test_cmd.set_defaults(handler=cmd_test_connection)

    # validate command
    validate_cmd = subparsers.add_parser('validate', help='Validate notification config')
    validate_cmd.add_argument('config', help='Path to notification config YAML')
    validate_cmd.set_defaults(handler=cmd_validate)

    # qos-levels command
    qos_cmd = subparsers.add_parser('qos-levels', help='List QoS levels')
    qos_cmd.set_defaults(handler=cmd_qos_levels)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.handler(args)
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
