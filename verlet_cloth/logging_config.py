import logging
import logging.handlers
'''
Example for usage of logger.*
from verlet_cloth.logging_config import setup_logging

logger = setup_logging()
logger.info('Starting simulation.')
logger.debug('Built mesh successfully.')
'''


def setup_logging(log_file=None, level=logging.INFO, quiet: bool = False):
    logger = logging.getLogger('verlet_cloth')

    if logger.handlers:
        if quiet:
            logger.handlers = [h for h in logger.handlers
                               if not isinstance(h, logging.StreamHandler)
                               or isinstance(h, logging.FileHandler)]
        return logger

    logger.setLevel(logging.DEBUG)

    # Log format
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # File handler
    if log_file is not None:
        file_handler = logging.handlers.RotatingFileHandler(log_file,
                                                            maxBytes=5_000_000,
                                                            backupCount=0)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
