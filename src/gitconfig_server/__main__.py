# src/gitconfig_server/__main__.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from . import __version__
from .config import load_root_config
from .errors import ConfigError
from .logging_conf import setup_logging
from .main import create_app
from .state import build_state

logger = logging.getLogger("gitconfig_server")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="gitconfig-server",
        description="Template-aware, git-backed config server (Spring Cloud Config compatible)",
    )
    parser.add_argument(
        "-c", "--config", default="config.yaml", metavar="FILE",
        help="Path to configuration file (YAML), default: config.yaml",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    log_cfg = setup_logging()
    logger.info("Loading config from %s", args.config)

    try:
        cfg = load_root_config(args.config)
        host, port = cfg.http.host_port
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    app = create_app(build_state(cfg))
    logger.info("Listening on http://%s:%s%s", host, port, cfg.http.normalized_base_path)
    uvicorn.run(app, host=host, port=port, log_config=log_cfg)
    return 0


if __name__ == "__main__":
    sys.exit(main())
