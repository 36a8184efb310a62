import logging

from memoraize.core.logging import ViewContextFilter, log_context


def make_record(**extra):
    record = logging.LogRecord("memoraize.test", logging.INFO, __file__, 1, "msg", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_filter_fills_missing_context():
    record = make_record()
    assert ViewContextFilter().filter(record)
    assert (record.user, record.view) == ("-", "-")


def test_filter_keeps_view_context():
    record = make_record(**log_context("user-1", "flashcards"))
    ViewContextFilter().filter(record)
    assert (record.user, record.view) == ("user-1", "flashcards")


def test_log_context_defaults():
    assert log_context() == {"user": "-", "view": "-"}
