"""
Pulumi program entry point for the webapp infrastructure stack.
"""

from .config import load_config
from .utils import setup_logging
from .webapp_infra import build_stack
from .webapp_infra.outputs import export_outputs


def run() -> None:
    """
    Declare the stack and export its outputs.

    Configuration and lookup errors are logged and re-raised so the
    provisioning engine reports the failed update.
    """
    logger = setup_logging()
    try:
        # Load and validate configuration
        config = load_config()

        # Setup logging
        logger = setup_logging(config.log_level)
        logger.info("Starting stack declaration")

        outputs = build_stack(config)
        export_outputs(outputs)

        logger.info(f"Stack declaration completed. Exported: {', '.join(sorted(outputs))}")

    except ValueError as e:
        # Configuration or validation errors
        logger.error(f"Configuration error: {str(e)}")
        raise
