"""
Logging Setup
^^^^^^^^^^^^^
Provides a setup_logger function to configure process-wide logging using logger.cfg.
"""
import configparser
import logging
import logging.config
import os


def setup_logger(name: str | None = None, level: int | str | None = None) -> logging.Logger:
    """
    Set up logging from the 'logger.cfg' file and return the logger with the provided name.

    Records go to stderr, stdout is left to the witness document. `level`, when given,
    overrides the level of the root logger.
    """
    config = configparser.ConfigParser()
    config.read(os.path.join(os.path.dirname(os.path.abspath(__file__)), "logger.cfg"))
    logging.config.fileConfig(config, disable_existing_loggers=False)

    if level is not None:
        logging.getLogger().setLevel(level)

    logger = logging.getLogger(name)

    return logger
