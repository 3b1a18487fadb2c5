import logging


def get_logger(name="pos_ledger", level=None):
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level or logging.INFO)
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(ch)
    elif level is not None:
        logger.setLevel(level)
    return logger
