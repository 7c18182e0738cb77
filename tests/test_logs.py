"""Tests for the append-only record log."""

from datetime import datetime

from motion_logger.errors import LogDeleteError, LogWriteError
from motion_logger.events import Category, LogRecord
from motion_logger.logs import LogAppender, format_line

T = datetime(2024, 3, 5, 14, 7, 9)


class TestLogAppender:
    """Test suite for LogAppender file semantics."""

    def test_reset_then_append_yields_single_line(self, tmp_path):
        """Test that reset followed by one append leaves one line."""
        appender = LogAppender(tmp_path)
        appender.append(LogRecord(T, Category.HEADING, "0.5"))

        appender.reset()
        assert appender.append(LogRecord(T, Category.HEADING, "1.23"))

        assert appender.read_lines() == ["2024-03-05 14:07:09, HEADING, 1.23"]
        content = appender.path.read_text(encoding="utf-8")
        assert content == "2024-03-05 14:07:09, HEADING, 1.23\n"

    def test_append_creates_then_appends(self, tmp_path):
        """Test that the first append creates the file and later ones append."""
        appender = LogAppender(tmp_path / "Documents")
        assert not appender.path.exists()

        appender.append(LogRecord(T, Category.STEP_COUNT, "10"))
        appender.append(LogRecord(T, Category.STEP_COUNT, "12"))

        assert appender.read_lines() == [
            "2024-03-05 14:07:09, STEPCOUNT, 10",
            "2024-03-05 14:07:09, STEPCOUNT, 12",
        ]
        assert appender.write_count == 2

    def test_append_preserves_existing_content(self, tmp_path):
        """Test that appending keeps earlier content."""
        (tmp_path / "log.txt").write_text("earlier line\n", encoding="utf-8")
        appender = LogAppender(tmp_path)

        appender.append(LogRecord(T, Category.ACTIVITY_TYPE, "Walking"))

        assert appender.read_lines() == [
            "earlier line",
            "2024-03-05 14:07:09, ACTIVITYTYPE, Walking",
        ]

    def test_custom_file_name(self, tmp_path):
        """Test writing to a configured file name."""
        appender = LogAppender(tmp_path, file_name="motion.txt")
        appender.append(LogRecord(T, Category.HEADING, "1.0"))
        assert (tmp_path / "motion.txt").exists()

    def test_reset_missing_file_is_noop(self, tmp_path):
        """Test resetting when no log file exists."""
        appender = LogAppender(tmp_path)
        assert appender.reset()
        assert appender.reset()
        assert appender.failure_count == 0
        assert appender.read_lines() == []

    def test_write_failure_is_reported_not_raised(self, tmp_path):
        """Test that write failures go to the error handler."""
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        errors = []
        appender = LogAppender(blocker, on_error=errors.append)

        assert appender.append(LogRecord(T, Category.HEADING, "1.0")) is False
        assert appender.failure_count == 1
        assert appender.write_count == 0
        assert len(errors) == 1
        assert isinstance(errors[0], LogWriteError)

    def test_delete_failure_is_reported_not_raised(self, tmp_path):
        """Test that delete failures go to the error handler."""
        (tmp_path / "log.txt").mkdir()
        errors = []
        appender = LogAppender(tmp_path, on_error=errors.append)

        assert appender.reset() is False
        assert appender.failure_count == 1
        assert isinstance(errors[0], LogDeleteError)


def test_format_line():
    """Test the log line layout."""
    record = LogRecord(T, Category.PEDOMETER_EVENT, "Resume")
    assert format_line(record) == "2024-03-05 14:07:09, PEDOMETEREVENT, Resume"
