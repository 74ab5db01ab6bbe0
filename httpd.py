import argparse
import ipaddress
import logging
import logging.handlers
import os
import queue
import sys

from servedir.config import Config, build_headers, normalize_root
from servedir.server import AsyncHTTPServer as Server


def parse_header(value):
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"invalid header {value!r}, expected name:value")
    return name.strip(), header_value.strip()


def parse_host(value):
    try:
        return str(ipaddress.IPv4Address(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid host address {value!r}")


def build_parser():
    # -h is the host flag, so help is --help only
    parser = argparse.ArgumentParser(prog="serve-dir", description="Serve a directory over http", add_help=False)
    parser.add_argument("directory", type=str, help="directory to serve")
    parser.add_argument("--host", "-h", type=parse_host, default="127.0.0.1", help="ipv4 address to listen on")
    parser.add_argument("--port", "-p", type=int, default=8080, help="port to listen on")
    parser.add_argument("--header", "-H", type=parse_header, action="append", default=[], dest="headers",
                        metavar="NAME:VALUE", help="add a response header, may be repeated")
    parser.add_argument("--no-default-headers", action="store_true",
                        help="do not add the default header [access-control-allow-origin:*]")
    parser.add_argument("--404", "--not-found", type=str, default=None, dest="not_found_file", metavar="FILE",
                        help="file served as the body of 404 responses")
    parser.add_argument("--debug", "-D", action="store_true", help="enable debug logging")
    parser.add_argument("--help", action="help", help="show this help message and exit")
    return parser


def parse_config(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not os.path.isdir(args.directory):
        parser.error(f"invalid directory path {args.directory!r}")
    return Config(
        root=normalize_root(args.directory),
        headers=build_headers(args.headers, no_default_headers=args.no_default_headers),
        not_found_file=args.not_found_file,
        host=args.host,
        port=args.port,
        debug=args.debug,
    )


def setup_logging(debug=False):
    """Route records through a queue so request tasks never block on the stream."""
    records = queue.SimpleQueue()
    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    listener = logging.handlers.QueueListener(records, stream)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    root.addHandler(logging.handlers.QueueHandler(records))
    listener.start()
    return listener


def main(argv=None):
    config = parse_config(argv)
    listener = setup_logging(config.debug)
    try:
        logging.getLogger(__name__).debug("Starting with %r", config)
        server = Server(config)
        server.run()
    finally:
        listener.stop()

if __name__ == "__main__":
    main()
