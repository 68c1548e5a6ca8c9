import io
import logging

from workspace_check.foundation.logging_utils import (
    KERNEL_LOGGER_NAME,
    LOGGER_NAME,
    setup_operational_logger,
)


def test_operational_logger_writes_formatted_lines_to_stream():
    stream = io.StringIO()
    logger = setup_operational_logger(stream=stream)

    logger.info("checking feature %s ...", "contract")
    logger.debug("hidden at INFO")

    text = stream.getvalue()
    assert "| INFO | checking feature contract ..." in text
    assert "hidden at INFO" not in text
    assert logger.propagate is False


def test_verbose_enables_debug_and_covers_kernel_logger():
    stream = io.StringIO()
    setup_operational_logger(verbose=True, stream=stream)

    logging.getLogger(f"{KERNEL_LOGGER_NAME}.engine.runner").debug("Running cargo fmt")
    logging.getLogger(LOGGER_NAME).debug("Run state: executing -> reporting")

    text = stream.getvalue()
    assert "| DEBUG | Running cargo fmt" in text
    assert "| DEBUG | Run state: executing -> reporting" in text


def test_repeated_setup_does_not_duplicate_handlers():
    stream = io.StringIO()
    setup_operational_logger(stream=io.StringIO())
    logger = setup_operational_logger(stream=stream)

    logger.warning("once")

    assert stream.getvalue().count("once") == 1
    assert len(logger.handlers) == 1
