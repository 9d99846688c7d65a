"""
PactStub CLI

Command-line interface for running pact stubs.

Commands:
    serve       - Serve a pact from a file, JSON text or broker URL
    echo        - Start an echo stub
    validate    - Validate a pact without serving it

Examples:
    # Serve a pact file on port 9000
    pactstub serve consumer-provider.json --port 9000

    # Serve the latest pact from a broker, only for one provider state
    pactstub serve https://broker/pacts/provider/P/consumer/C/latest --provider-state "a widget exists"

    # Echo request bodies back with status 201
    pactstub echo --status 201 --port 9001
"""

import argparse
import sys
import time
from typing import Optional

from .common import FetchError, InvalidContract, PortUnavailable, create_stub_logger
from .sources import BrokerSource, resolve_source
from .stub import Stub, StubConfig, parse_contract


def _load_config(args) -> StubConfig:
    config = StubConfig.from_yaml(args.config) if args.config else StubConfig()
    if args.host:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.log_level:
        config.log_level = args.log_level
    return config.apply_env()


def _wait_until_interrupted(stub: Stub):
    try:
        while stub.is_bound:
            time.sleep(0.5)
    except KeyboardInterrupt:
        print("\n\n👋 Stub stopped")
    finally:
        stub.dispose()


def cmd_serve(args):
    """
    Serve a pact until interrupted.

    Args:
        args: Parsed command-line arguments
    """
    print(f"🎭 PactStub")
    print(f"   Pact: {args.locator}")

    config = _load_config(args)
    logger = create_stub_logger(args.log_dir, level=config.log_level)
    stub = Stub.create(config.port, config=config, logger=logger)

    if args.provider_state:
        stub.filter_on_provider_state(args.provider_state)
    if args.description:
        stub.filter_on_description(args.description)

    source = resolve_source(args.locator)
    if isinstance(source, BrokerSource):
        source = stub.broker_source

    match_body = config.match_body and not args.no_match_body

    try:
        stub.load(source, args.locator, match_body=match_body)
    except (FetchError, InvalidContract, PortUnavailable) as e:
        print(f"❌ Failed to start stub: {e}")
        sys.exit(1)

    print(f"   Listening: {stub.url}")
    print(f"   Interactions: {len(stub.document)}")
    print(f"   Body matching: {'on' if match_body else 'off'}")
    if not stub.filters.is_empty:
        print(f"   Filters: {stub.filters.to_dict()}")
    if config.admin_enabled:
        print(f"   Admin API: {stub.url}{config.admin_prefix}/metrics")
    print()

    _wait_until_interrupted(stub)


def cmd_echo(args):
    """
    Run an echo stub until interrupted.

    Args:
        args: Parsed command-line arguments
    """
    print(f"🔁 PactStub Echo")

    config = _load_config(args)
    logger = create_stub_logger(args.log_dir, level=config.log_level)
    stub = Stub.create(config.port, config=config, logger=logger)

    try:
        stub.echo(args.status)
    except PortUnavailable as e:
        print(f"❌ Failed to start stub: {e}")
        sys.exit(1)

    print(f"   Listening: {stub.url}")
    print(f"   Status: {args.status}")
    print()

    _wait_until_interrupted(stub)


def cmd_validate(args):
    """
    Validate a pact and report its interactions.

    Args:
        args: Parsed command-line arguments
    """
    print(f"✓ PactStub Validation")
    print(f"   Pact: {args.locator}")

    config = StubConfig().apply_env()
    source = resolve_source(
        args.locator,
        timeout=config.broker_timeout,
        username=config.broker_username,
        password=config.broker_password,
        token=config.broker_token
    )

    try:
        document = parse_contract(source.fetch(args.locator))
    except (FetchError, InvalidContract) as e:
        print(f"❌ {e}")
        sys.exit(1)

    print(f"   Consumer: {document.consumer or '(unnamed)'}")
    print(f"   Provider: {document.provider or '(unnamed)'}")
    print(f"   Interactions: {len(document)}")
    print()

    for interaction in document:
        state = f" [{interaction.provider_state}]" if interaction.provider_state else ""
        print(f"   • {interaction.request.method} {interaction.request.path} -> "
              f"{interaction.response.status}  {interaction.description}{state}")

    print()
    print("✅ Pact is valid JSON")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="PactStub - HTTP stub server replaying pact contract interactions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve a pact file
  %(prog)s serve consumer-provider.json --port 9000

  # Serve without comparing request bodies
  %(prog)s serve consumer-provider.json --no-match-body

  # Echo request bodies with status 200
  %(prog)s echo --port 9001

  # Validate a pact from a broker
  %(prog)s validate https://broker/pacts/provider/P/consumer/C/latest
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    def add_server_options(sub):
        sub.add_argument('--host', help='Host to bind (default: 127.0.0.1)')
        sub.add_argument('-p', '--port', type=int, help='Port to bind (default: ephemeral)')
        sub.add_argument('-c', '--config', help='YAML configuration file')
        sub.add_argument('--log-level', choices=['debug', 'info', 'warning', 'error'],
                         help='Log level (default: info)')
        sub.add_argument('--log-dir', help='Directory for a rotating log file')

    # --- SERVE command ---
    serve_parser = subparsers.add_parser('serve', help='Serve a pact')
    serve_parser.add_argument('locator', help='Pact file path, JSON text, or broker URL')
    serve_parser.add_argument('--no-match-body', action='store_true', help='Ignore request bodies when matching')
    serve_parser.add_argument('--provider-state', help='Only serve interactions with this provider state')
    serve_parser.add_argument('--description', help='Only serve interactions with this description')
    add_server_options(serve_parser)

    # --- ECHO command ---
    echo_parser = subparsers.add_parser('echo', help='Echo request bodies back')
    echo_parser.add_argument('-s', '--status', type=int, default=200, help='Response status (default: 200)')
    add_server_options(echo_parser)

    # --- VALIDATE command ---
    validate_parser = subparsers.add_parser('validate', help='Validate a pact')
    validate_parser.add_argument('locator', help='Pact file path, JSON text, or broker URL')

    return parser


def main(argv: Optional[list] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'serve':
        cmd_serve(args)
    elif args.command == 'echo':
        cmd_echo(args)
    elif args.command == 'validate':
        cmd_validate(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == '__main__':
    main()
