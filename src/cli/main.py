"""TagMap CLI entry points.

This module exposes store inspection and schema commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from typing import Any, Sequence

from core.config import TagMapConfig
from core.constants import SANDBOX_STORE_URL
from core.errors import TagMapError
from core.types import RemoteId
from mapping.mapper_client import TagMapClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="tagmap", description="TagMap tag store CLI")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--base-url", help="Override TAGMAP_BASE_URL for this command")
    target.add_argument(
        "--sandbox",
        action="store_true",
        help=f"Use the sandbox store at {SANDBOX_STORE_URL}",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_query_command(subparsers)
    _add_tags_command(subparsers)
    _add_ensure_namespace_command(subparsers)
    _add_ensure_tag_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the TagMap CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(SANDBOX_STORE_URL if args.sandbox else args.base_url)
        with client:
            return _dispatch(parser, client, args)
    except TagMapError as error:
        print(f"error={error}")
        return 1


def _dispatch(
    parser: argparse.ArgumentParser,
    client: TagMapClient,
    args: argparse.Namespace,
) -> int:
    if args.command == "query":
        return _run_query_command(client, args)
    if args.command == "tags":
        return _run_tags_command(client, args)
    if args.command == "ensure-namespace":
        return _run_ensure_namespace_command(client, args)
    if args.command == "ensure-tag":
        return _run_ensure_tag_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(base_url: str | None) -> TagMapClient:
    """Build SDK client with optional base URL override.

    Args:
        base_url: Optional override URL.

    Returns:
        Configured SDK client.
    """
    config = TagMapConfig.from_env()
    if base_url:
        config = config.with_base_url(base_url)
    return TagMapClient(config)


def _run_query_command(client: TagMapClient, args: argparse.Namespace) -> int:
    """Handle query command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    ids = client.store.find_matching(args.expression)
    if ids is None:
        print(f"error=query rejected: {args.expression}")
        return 1
    for object_id in ids:
        print(object_id)
    return 0


def _run_tags_command(client: TagMapClient, args: argparse.Namespace) -> int:
    """Handle tags command."""
    remote_object = client.store.fetch_object(RemoteId(args.object_id), include_about=True)
    if remote_object is None:
        print(f"error=object not found: {args.object_id}")
        return 1
    for tag_path in remote_object.tag_paths:
        print(tag_path)
    return 0


def _run_ensure_namespace_command(client: TagMapClient, args: argparse.Namespace) -> int:
    """Handle ensure-namespace command."""
    namespace = client.resolve_namespace(args.name, args.description)
    print(namespace.path)
    return 0


def _run_ensure_tag_command(client: TagMapClient, args: argparse.Namespace) -> int:
    """Handle ensure-tag command."""
    resolution = client.resolve_tag(args.namespace, args.name, args.description)
    print(f"{resolution.tag.path}\t{'created' if resolution.created else 'existing'}")
    return 0


def _add_query_command(subparsers: Any) -> None:
    """Register query subcommand."""
    parser = subparsers.add_parser("query", help="List object ids matching a store query")
    parser.add_argument("expression", help="Query expression, e.g. 'has alice/people/name'")


def _add_tags_command(subparsers: Any) -> None:
    """Register tags subcommand."""
    parser = subparsers.add_parser("tags", help="List tag paths present on an object")
    parser.add_argument("object_id", help="Remote object identifier")


def _add_ensure_namespace_command(subparsers: Any) -> None:
    """Register ensure-namespace subcommand."""
    parser = subparsers.add_parser(
        "ensure-namespace",
        help="Resolve or create a namespace under the configured user",
    )
    parser.add_argument("name", help="Owner-relative namespace, e.g. people")
    parser.add_argument("--description", help="Description for a newly created namespace")


def _add_ensure_tag_command(subparsers: Any) -> None:
    """Register ensure-tag subcommand."""
    parser = subparsers.add_parser("ensure-tag", help="Resolve or create a tag")
    parser.add_argument("namespace", help="Owner-relative namespace, e.g. people")
    parser.add_argument("name", help="Local tag name")
    parser.add_argument("--description", help="Description for a newly created tag")
