"""Test log level filtering in the file sink."""

import pytest

from linearity.core.log import (
    ConsoleSink,
    FileSink,
    LevelFilteringExporter,
    level_name,
    setup_logger,
)

pytestmark = pytest.mark.usefixtures("restore_logging")


@pytest.fixture
def file_logger(tmp_path):
    """Return a factory for a file-only logger at a given level."""
    def _make(level):
        log_file = tmp_path / f"{level}.log"
        logger = setup_logger(
            log_root=tmp_path,
            run_name="test",
            console=ConsoleSink(enabled=False),
            file=FileSink(enabled=True, level=level, path=str(log_file)),
        )
        return logger, log_file
    return _make


def _emit_all(logger):
    logger.spew("SPEW message")
    logger.trace("TRACE message")
    logger.debug("DEBUG message")
    logger.info("INFO message")
    logger.warn("WARN message")
    logger.error("ERROR message")
    logger.close()


@pytest.mark.parametrize(
    ("level", "included", "excluded"),
    [
        ("spew", ["SPEW", "TRACE", "DEBUG", "INFO"], []),
        ("trace", ["TRACE", "DEBUG", "INFO"], ["SPEW"]),
        ("debug", ["DEBUG", "INFO", "WARN"], ["SPEW", "TRACE"]),
        ("info", ["INFO", "WARN", "ERROR"], ["SPEW", "TRACE", "DEBUG"]),
        ("warn", ["WARN", "ERROR"], ["DEBUG", "INFO"]),
        ("error", ["ERROR"], ["INFO", "WARN"]),
    ],
)
def test_file_sink_level(file_logger, level, included, excluded):
    """Records below the sink level never reach the file."""
    logger, log_file = file_logger(level)
    _emit_all(logger)

    content = log_file.read_text()
    for name in included:
        assert f"{name} message" in content
    for name in excluded:
        assert f"{name} message" not in content


def test_level_ordering():
    """spew < trace < debug < info < warn < error < fatal."""
    thresholds = LevelFilteringExporter._level_thresholds
    order = ['spew', 'trace', 'debug', 'info', 'warn', 'error', 'fatal']

    values = [thresholds[name] for name in order]
    assert values == sorted(values)
    assert thresholds['spew'] == 1  # SEVERITY_NUMBER_TRACE
    assert thresholds['trace'] == 3  # SEVERITY_NUMBER_TRACE3
    assert thresholds['info'] == 9  # SEVERITY_NUMBER_INFO


def test_level_name_round_trip():
    thresholds = LevelFilteringExporter._level_thresholds
    for name, number in thresholds.items():
        assert level_name(number) == name
    assert level_name(0) == "unknown"


@pytest.mark.parametrize(
    ("level", "kept"), [("spew", True), ("debug", False)]
)
def test_log_by_level_name(file_logger, level, kept):
    """log() routes a level given by name through the same filter."""
    logger, log_file = file_logger(level)
    logger.log("spew", "NAMED message")
    logger.close()

    assert ("NAMED message" in log_file.read_text()) is kept


def test_runner_replays_output_at_level(file_logger):
    from linearity.core.runner import Runner

    logger, log_file = file_logger("debug")
    Runner().execute(
        "echo 'Merge made by the ort strategy.'",
        check=False,
        log_level="debug",
    )
    logger.close()

    assert "Merge made by the ort strategy." in log_file.read_text()
