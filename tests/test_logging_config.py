import logging

from lexibridge.logging_config import get_logger, setup_logging


class TestLogging:

    def test_debug_mode_sets_level(self):
        assert setup_logging(True).level == logging.DEBUG
        assert setup_logging(False).level == logging.INFO

    def test_noisy_libraries_quietened(self):
        setup_logging(False)
        assert logging.getLogger('werkzeug').level == logging.WARNING
        assert logging.getLogger('sqlalchemy.engine').level == logging.WARNING

    def test_component_loggers_share_namespace(self):
        assert get_logger('orchestrator').name == 'lexibridge.orchestrator'
