import sys
import logging
from pathlib import Path
from typing import List, Optional

from cli import build_parser, run, EXIT_BAD_INPUT
from config import SystemConfig
from core.errors import ConfigError
from utils.logging_config import setup_logging


def initialize_directories(config: SystemConfig):
    """Create necessary directories"""
    Path(config.corpus_dir).mkdir(parents=True, exist_ok=True)
    Path(config.cache_path).parent.mkdir(parents=True, exist_ok=True)


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    # Load configuration
    try:
        config = SystemConfig.load(args.config)
    except ConfigError as e:
        print(f"Error: {e}")
        return EXIT_BAD_INPUT

    if args.corpus:
        config.corpus_dir = args.corpus

    # Setup logging
    setup_logging(config.log_level, config.log_dir)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting Document Verifier ({args.command})")

    # Initialize directories
    initialize_directories(config)

    return run(args, config)


if __name__ == "__main__":
    sys.exit(main())
