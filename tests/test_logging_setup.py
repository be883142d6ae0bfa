import logging
from datetime import date

from paycheck_planner.logging_setup import get_logger, setup_logging


def test_setup_logging_writes_dated_file(tmp_path):
    logger = setup_logging('debug', tmp_path)
    try:
        assert logger is get_logger()
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        # Calling again replaces handlers instead of stacking them
        logger = setup_logging('INFO', tmp_path)
        assert len(logger.handlers) == 2

        logging.getLogger('paycheck_planner.db').info("stored one")
        for handler in logger.handlers:
            handler.flush()
        log_file = tmp_path / f"planner-{date.today().isoformat()}.log"
        assert "stored one" in log_file.read_text(encoding='utf-8')
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
