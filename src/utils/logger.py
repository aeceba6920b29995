import json
import logging
import time


class JsonFormatter(logging.Formatter):
    """One JSON object per record; the message is escaped by json.dumps."""

    converter = time.gmtime  # UTC timestamps

    def format(self, record):
        entry = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def get_logger(name="kvage", level=None):
    """Structured logger for kvage. Writes to stderr so stdout stays command output."""
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)

    if "." in name:
        return logger

    if level is not None or not logger.handlers:
        # a fresh handler binds whatever sys.stderr is now
        for old in list(logger.handlers):
            logger.removeHandler(old)
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        if level is None:
            logger.setLevel(logging.WARNING)

    return logger


def verbosity_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING
