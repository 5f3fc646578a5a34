"""
SSM Config Builder — command-line entry point.

Reads settings (see settings.py), fetches every configured prefix from SSM
Parameter Store and writes the assembled document to stdout.

Usage:
    CONFIG_PREFIXES=/app/schema CONFIG_SORT_TYPES=true python -m ssm_config_builder.main
    python -m ssm_config_builder.main settings.yaml

Exit codes:
    0  document written
    1  build failed (fetch, parse, shape or dependency error) or bad settings
"""

import logging
import sys
from typing import Optional

from ssm_config_builder.builder import ConfigBuilder
from ssm_config_builder.errors import BuildError
from ssm_config_builder.parameter_store import SsmParameterStore
from ssm_config_builder.settings import load_settings

logger = logging.getLogger(__name__)


def main(argv: Optional[list[str]] = None) -> int:
    """Build the document described by settings and write it to stdout."""
    args = sys.argv[1:] if argv is None else argv
    config_path = args[0] if args else None

    try:
        settings = load_settings(config_path)
    except (OSError, ValueError) as exc:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr)
        logger.error("Invalid settings: %s", exc)
        return 1

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    if not settings.prefixes:
        logger.error("No prefixes configured — set CONFIG_PREFIXES")
        return 1

    store = SsmParameterStore(
        region=settings.region,
        with_decryption=settings.with_decryption,
        page_size=settings.page_size,
    )
    builder = ConfigBuilder(store)

    try:
        content = builder.build_from_prefixes(settings.to_build_options())
    except BuildError as exc:
        logger.error("Config build failed: %s", exc)
        return 1

    text = content.decode("utf-8")
    sys.stdout.write(text if text.endswith("\n") else text + "\n")
    sys.stdout.flush()
    logger.info("Config written | bytes=%d", len(content))
    return 0


if __name__ == "__main__":
    sys.exit(main())
