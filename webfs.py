"""CLI entry point for webfs: browse a remote listing tree, or serve one."""

import argparse
import logging
import shutil
import sys

from backend import BackendError, DirectoryBackend
from client import DEFAULT_CONNECT_TIMEOUT, DEFAULT_READ_TIMEOUT, WebFileClient
from errors import WebFSError
from registry import WebFileSystemRegistry
from server import make_server
from webpath import SEPARATOR


def make_registry(args) -> WebFileSystemRegistry:
    """Build a registry whose mounts use the transport options given on the command line."""
    def client_factory(server: str) -> WebFileClient:
        return WebFileClient.for_server(
            server,
            proxy=args.proxy,
            connect_timeout=args.connect_timeout,
            read_timeout=args.read_timeout,
            insecure=args.insecure,
        )
    return WebFileSystemRegistry(client_factory)


def resolve(registry: WebFileSystemRegistry, address: str):
    """Return the path of address. Addresses without a trailing "/" may name a file."""
    _, _, remote = address.partition(":")
    if address.endswith(SEPARATOR) or SEPARATOR not in remote.split("://", 1)[-1]:
        return registry.get_path(address)
    parent, _, name = address.rpartition(SEPARATOR)
    directory = registry.get_path(parent)
    return directory.filesystem.child(directory, name)


def format_entry(path) -> str:
    attributes = path.attributes
    kind = "f" if attributes.is_file else "d"
    size = str(attributes.size) if attributes.is_file else "-"
    return f"{kind} {size:>12} {attributes.modified:%Y-%m-%d %H:%M:%S} {path.name}"


def cmd_ls(registry, args):
    path = resolve(registry, args.address)
    with path.iterdir() as listing:
        for entry in listing:
            print(format_entry(entry))


def cmd_stat(registry, args):
    path = resolve(registry, args.address)
    for key, value in path.filesystem.attribute_map(path).items():
        print(f"{key}: {value}")


def cmd_cat(registry, args):
    path = resolve(registry, args.address)
    with path.open() as stream:
        shutil.copyfileobj(stream, sys.stdout.buffer)


def cmd_find(registry, args):
    path = resolve(registry, args.address)
    fs = path.filesystem
    matches = fs.path_matcher(args.pattern)
    for entry in fs.walk(path):
        if matches(entry):
            print(entry)


def cmd_serve(args):
    try:
        backend = DirectoryBackend(args.directory)
    except BackendError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    server = make_server(backend, args.host, args.port)
    print(f"Serving {args.directory} on http://{args.host}:{args.port}/")
    print("Press Ctrl+C to stop.")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down.")
        server.server_close()


COMMANDS = {
    "ls": (cmd_ls, "List a directory"),
    "stat": (cmd_stat, "Show the attributes of a file or directory"),
    "cat": (cmd_cat, "Write the content of a file to stdout"),
    "find": (cmd_find, "List every path below a directory matching a pattern"),
}


def main():
    parser = argparse.ArgumentParser(
        description="webfs: read-only access to remote listing trees"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and mounts")
    parser.add_argument("--proxy", help="HTTP proxy as host[:port]")
    parser.add_argument("--connect-timeout", type=int, default=DEFAULT_CONNECT_TIMEOUT,
                        help="Connect timeout in milliseconds")
    parser.add_argument("--read-timeout", type=int, default=DEFAULT_READ_TIMEOUT,
                        help="Read timeout in milliseconds, 0 for none")
    parser.add_argument("--insecure", action="store_true",
                        help="Do not verify https certificates")

    sub = parser.add_subparsers(dest="command")

    for name, (_, help_text) in COMMANDS.items():
        p = sub.add_parser(name, help=help_text)
        p.add_argument("address", help="Address such as webfs:http://host/base/dir/")
        if name == "find":
            p.add_argument("-p", "--pattern", default="glob:**",
                           help="glob: or regex: pattern matched against full addresses")

    p = sub.add_parser("serve", help="Serve a local directory in the listing format")
    p.add_argument("directory", help="Directory to serve")
    p.add_argument("-p", "--port", type=int, default=8080, help="Port to listen on")
    p.add_argument("--host", default="localhost", help="Host to bind to")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args)
        return

    command, _ = COMMANDS[args.command]
    try:
        command(make_registry(args), args)
    except WebFSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
