from datetime import datetime
import os
import logging
import json
import sys

DEFAULT_LOGGER_NAME = "markov_chain"


class JsonLogFormatter(logging.Formatter):
    """Formatter that renders each log record as a single JSON object."""

    def format(self, record):
        """
        Format the log record as a JSON string.

        Args:
            record: The log record to format

        Returns:
            str: JSON formatted log string
        """
        log_data = {
            'timestamp': datetime.now().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'path': record.pathname,
            'line': record.lineno,
            'function': record.funcName
        }

        # Extra payload passed as extra={"metrics": {...}}
        if hasattr(record, 'metrics'):
            log_data['metrics'] = record.metrics

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_data, default=str)


def prepare_log_file(log_file_path):
    """
    Make sure the directory of a log file exists.

    Args:
        log_file_path (str): Path to the log file

    Returns:
        str: Absolute path to the log file
    """
    log_file_path = os.path.abspath(log_file_path)
    log_dir = os.path.dirname(log_file_path)
    os.makedirs(log_dir, exist_ok=True)
    return log_file_path


def default_log_path(log_dir):
    """Timestamped log file name inside ``log_dir``."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return os.path.join(log_dir, f"markov_chain_{timestamp}.log")


def get_logger(logger_name=DEFAULT_LOGGER_NAME, log_file=None, clear_existing=True,
               console_json=True, level=logging.DEBUG):
    """
    Get a configured logger instance with JSON formatting.

    Args:
        logger_name (str): Name for the logger
        log_file (str, optional): Path to the log file
        clear_existing (bool): Whether to clear existing handlers
        console_json (bool): Whether to use JSON formatting for console output
        level (int): Level of the logger itself

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    if clear_existing and logger.handlers:
        logger.handlers.clear()

    # Already configured by an earlier call
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)

    if console_json:
        console_handler.setFormatter(JsonLogFormatter())
    else:
        console_formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(console_formatter)

    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(prepare_log_file(log_file))
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonLogFormatter())
        logger.addHandler(file_handler)

    return logger


def configure_logger(logger_name, logging_config):
    """
    Build a logger from the ``logging`` section of the project configuration.

    Args:
        logger_name (str): Name for the logger
        logging_config (dict): Mapping with optional ``level``, ``log_file``,
            ``log_dir`` and ``console_json`` keys

    Returns:
        logging.Logger: Configured logger instance
    """
    logging_config = logging_config or {}

    level = logging_config.get("level", "DEBUG")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {logging_config['level']}")

    log_file = logging_config.get("log_file")
    if log_file is None and logging_config.get("log_dir"):
        log_file = default_log_path(logging_config["log_dir"])

    return get_logger(
        logger_name,
        log_file=log_file,
        console_json=logging_config.get("console_json", True),
        level=level,
    )


def log_json(logger, message, data=None, level=logging.INFO):
    """
    Log a message with an optional ``metrics`` payload.

    Args:
        logger (logging.Logger): Logger instance
        message (str): Log message
        data (dict, optional): Metrics rendered under the ``metrics`` key
        level (int): Logging level of the record
    """
    if data is None:
        logger.log(level, message)
    else:
        logger.log(level, message, extra={"metrics": data})
