import logging
import logging.config
import os


def setup_logger(config_path='config/logging.conf', default_level=logging.INFO):
    """
    Set up logging configuration from a file.
    Args:
        config_path: Path to the logging configuration file.
        default_level: Default logging level if the config file is not found.
    """
    if config_path and os.path.exists(config_path):
        logging.config.fileConfig(config_path, disable_existing_loggers=False)
        logging.getLogger("feedguard").info(f"Logging configuration loaded from {config_path}")
    else:
        logging.basicConfig(level=default_level,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        logging.getLogger("feedguard").warning(
            f"Logging configuration file not found. Using default level: {logging.getLevelName(default_level)}")
