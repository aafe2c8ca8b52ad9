"""Command line entry point: ``python -m hastebin_core --config config.yaml``."""

import argparse
import sys

from hastebin_core.config import Config
from hastebin_core.exceptions import ConfigError
from hastebin_core.observability import configure_logging, get_logger
from hastebin_core.plugins import create_key_generator, get_backend
from hastebin_core.service import Hastebin

logger = get_logger("hastebin_core.main")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hastebin",
        description="Serve documents from a pluggable storage backend.",
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Configuration file (YAML or JSON). Missing file means defaults.",
    )
    parser.add_argument("--host", default=None, help="Override the bind host")
    parser.add_argument("--port", type=int, default=None, help="Override the bind port")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        config = Config.from_file(args.config)
        configure_logging(config.logging.level, config.logging.type)
        # Resolve names before serving so a typo fails before the port opens
        get_backend(config.storage.type)
        create_key_generator(config.key_generator, key_space=config.key_space)
    except ConfigError as e:
        print(f"hastebin: {e}", file=sys.stderr)
        return 2

    logger.info(
        "Starting server",
        context={
            "host": args.host or config.server.host,
            "port": args.port or config.server.port,
            "storage": config.storage.type,
        },
    )
    Hastebin(config).serve(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
