"""Logging configuration of the command line tools.

Library modules only create their own logger (``getLogger(__name__)``);
handlers are installed here, by the entry points.
"""

import logging
import os
import sys

_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(name='voltransform', log_file=None, level=logging.INFO):
    """Attach handlers to the package logger.

    Parameters
    ----------
    name : str, default='voltransform'
        Logger name.
    log_file : str, optional
        Also write messages to this file.
    level : int, default=logging.INFO
        Minimum level of the messages.

    Returns
    -------
    logger : logging.Logger

    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # calling twice must not duplicate messages
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = logging.Formatter(_format)
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        dirname = os.path.dirname(log_file)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
