from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.fetcher",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Dropping malformed record",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    message = formatter.format(_record(record_index=3, reason="pH: Value must be a JSON number.", unrelated="x"))

    assert message == "WARNING Dropping malformed record | reason=pH: Value must be a JSON number. record_index=3"


def test_formatter_skips_missing_and_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["sequence", "location"])

    assert formatter.format(_record(sequence=None)) == "Dropping malformed record"
    assert formatter.format(_record(location="North")) == "Dropping malformed record | location=North"
