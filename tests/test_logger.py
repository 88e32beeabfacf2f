"""
Tests for structured logging system.
"""

import pytest

from refpay.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logger functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with correct settings."""
        logger = StructuredLogger(
            name="test",
            level="DEBUG",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["names_resolved"] == 0

    def test_logging_with_context(self, tmp_path):
        """Context kwargs are appended as JSON."""
        logger = StructuredLogger(
            name="test_context",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Saved payroll batch", batch_id="batch_1", referee="JOSÉ PÉREZ")

        log_content = next(tmp_path.glob("*.log")).read_text(encoding="utf-8")
        assert '"batch_id": "batch_1"' in log_content
        assert "JOSÉ PÉREZ" in log_content

    def test_match_metrics(self, tmp_path):
        """Match metrics should be tracked correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_match(from_storage=True, needs_review=False)
        logger.record_match(from_storage=False, needs_review=True)
        logger.record_match(from_storage=False, needs_review=False)

        metrics = logger.get_metrics()

        assert metrics["names_resolved"] == 3
        assert metrics["cache_hits"] == 1
        assert metrics["low_confidence"] == 1
        assert metrics["cache_hit_rate"] == pytest.approx(0.333, rel=0.01)

    def test_no_hit_rate_without_matches(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        assert "cache_hit_rate" not in logger.get_metrics()

    def test_payroll_metrics(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.record_confirmation(manual=True)
        logger.record_confirmation(manual=False)
        logger.record_confirmation(manual=False)
        logger.record_payroll(12)
        logger.record_batch_saved()
        logger.record_error("DuplicateKey")
        logger.record_error("DuplicateKey")

        metrics = logger.get_metrics()
        assert metrics["confirmations"] == {"manual": 1, "auto": 2}
        assert metrics["referees_computed"] == 12
        assert metrics["batches_saved"] == 1
        assert metrics["errors_by_type"]["DuplicateKey"] == 2

    def test_metrics_summary_written(self, tmp_path):
        logger = StructuredLogger(name="test_summary", log_dir=tmp_path, enable_console=False)
        logger.record_error("NotFound")
        logger.log_metrics_summary()

        log_content = next(tmp_path.glob("*.log")).read_text(encoding="utf-8")
        assert "Payroll Session Metrics" in log_content
        assert "NotFound: 1" in log_content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        log_files = list(tmp_path.glob("refpay_*.log"))
        assert len(log_files) == 1
        assert "Test message" in log_files[0].read_text()

    def test_debug_always_reaches_file(self, tmp_path):
        """The file handler logs everything regardless of console level."""
        logger = StructuredLogger(name="test_levels", level="WARNING", log_dir=tmp_path, enable_console=False)
        logger.debug("kept")

        assert "kept" in next(tmp_path.glob("*.log")).read_text()

    def test_no_file_until_first_record(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = StructuredLogger(name="test_lazy", log_dir=log_dir, enable_console=False)
        assert not log_dir.exists()

        logger.info("first")

        assert len(list(log_dir.glob("refpay_*.log"))) == 1

    def test_configure_moves_file_and_keeps_counters(self, tmp_path):
        logger = StructuredLogger(name="test_configure", log_dir=tmp_path / "a", enable_console=False)
        logger.record_batch_saved()

        logger.configure("DEBUG", tmp_path / "b")
        logger.info("moved")

        assert not (tmp_path / "a").exists()
        assert "moved" in next((tmp_path / "b").glob("*.log")).read_text()
        assert logger.metrics["batches_saved"] == 1


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_batch_saved()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger2 is not logger1
        assert logger2.metrics["batches_saved"] == 0

    def test_level_from_environment(self, tmp_path, monkeypatch):
        reset_logger()
        monkeypatch.setenv("REFPAY_LOG_LEVEL", "WARNING")

        logger = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger.logger.level == 30
        reset_logger()
