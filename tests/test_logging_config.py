import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.simulator",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Updated sensors",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    message = formatter.format(_record(sensor_count=8, failed_count=0, unrelated="x"))

    assert message == "Updated sensors | sensor_count=8 failed_count=0"


def test_formatter_skips_missing_and_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record(sensor_id=None)) == "Updated sensors"
