"""
LexiBridge - Logging
Console logging shared by the API, the merge engine and the maintenance scripts.

Every module logs under the `lexibridge.` namespace through get_logger(), so
decisions, case writes and threshold swaps can be filtered together.
"""
import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

QUIET_LOGGERS = ('werkzeug', 'sqlalchemy.engine', 'flask_cors')

_logging_configured = False


def setup_logging(debug_mode=None, app_name='lexibridge'):
    """Configure stdout logging once per process

    `debug_mode` comes from AppConfig.debug_mode; scripts that run before a
    config exists fall back to the DEBUG environment variable.
    """
    global _logging_configured

    if debug_mode is None:
        debug_mode = os.environ.get('DEBUG', '').lower() in ('true', '1', 'yes')
    level = logging.DEBUG if debug_mode else logging.INFO
    app_logger = logging.getLogger(app_name)

    if _logging_configured:
        app_logger.setLevel(level)
        return app_logger

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app_logger.setLevel(level)
    _logging_configured = True
    return app_logger


def get_logger(name):
    """Logger for one component, e.g. get_logger('orchestrator')"""
    return logging.getLogger(f'lexibridge.{name}')
