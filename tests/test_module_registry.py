"""
Tests for ModuleRegistry and logging setup.

This module tests:
- Built-in subsystem registration
- Registering extra subsystems
- Debug flag and logger name lookups
- Per-subsystem debug filtering
"""

import logging

import pytest

from logstream.logging_setup import DebugLogFilter, MillisecondFormatter, setup_logging
from logstream.module_registry import ModuleRegistry, module_registry


class TestModuleRegistry:
    """Tests for ModuleRegistry."""

    def setup_method(self):
        """Set up test fixtures."""
        self.registry = ModuleRegistry()

    def test_builtin_modules(self):
        """Test the built-in subsystems are registered."""
        assert self.registry.get_module_names() == {"registry", "sources", "capture", "mcp"}

    def test_builtin_debug_flags(self):
        """Test each subsystem has a debug flag."""
        flags = self.registry.get_debug_flags()

        assert flags["--debug-registry"] == "registry"
        assert flags["--debug-sources"] == "sources"

    def test_register_module(self):
        """Test a registered subsystem gets a logger, a debug flag and a filter name."""
        self.registry.register_module(
            name="custom",
            description="Custom module",
            logger_name="logstream.custom",
            debug_flag="--debug-custom",
        )

        info = self.registry.get_module_info("custom")
        assert isinstance(info["logger"], logging.Logger)
        assert self.registry.get_debug_flags()["--debug-custom"] == "custom"
        assert self.registry.get_debug_logger_names({"custom"}) == {"logstream.custom"}

    def test_unknown_module_info(self):
        """Test unknown subsystems have no info."""
        assert self.registry.get_module_info("nonexistent") == {}

    def test_get_logger(self):
        """Test subsystem loggers."""
        assert self.registry.get_logger("registry").name == "logstream.registry"
        assert self.registry.get_logger("unknown").name == "unknown"

    def test_debug_logger_names(self):
        """Test logger names can be restricted to some subsystems."""
        assert self.registry.get_debug_logger_names({"registry", "mcp"}) == {"logstream.registry", "logstream.mcp"}
        assert "logstream.sources" in self.registry.get_debug_logger_names()

    def test_global_instance(self):
        """Test the module-level instance exists."""
        assert "registry" in module_registry.get_module_names()


def make_record(name, level):
    """Create a log record."""
    return logging.LogRecord(name, level, __file__, 1, "message", None, None)


class TestDebugLogFilter:
    """Tests for DebugLogFilter."""

    def test_non_debug_always_passes(self):
        """Test INFO and above are never filtered."""
        assert DebugLogFilter(set()).filter(make_record("anything", logging.INFO)) is True

    def test_none_allows_all_debug(self):
        """Test None shows all debug output."""
        assert DebugLogFilter(None).filter(make_record("anything", logging.DEBUG)) is True

    def test_empty_hides_debug(self):
        """Test an empty set hides all debug output."""
        assert DebugLogFilter(set()).filter(make_record("logstream.registry", logging.DEBUG)) is False

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("logstream.sources", True),
            ("logstream.sources.memory", True),
            ("logstream.sourcesx", False),
            ("logstream.registry", False),
        ],
    )
    def test_subsystem_prefix(self, name, expected):
        """Test child loggers of a selected subsystem pass."""
        assert DebugLogFilter({"logstream.sources"}).filter(make_record(name, logging.DEBUG)) is expected


class TestSetupLogging:
    """Tests for setup_logging."""

    def teardown_method(self):
        """Remove handlers added by the test."""
        root = logging.getLogger()
        for handler in list(root.handlers):
            if getattr(handler, "_logstream_test", False):
                root.removeHandler(handler)
        root.setLevel(logging.WARNING)

    def test_setup_with_level(self):
        """Test a plain level setup."""
        handler = setup_logging("warning")
        handler._logstream_test = True

        assert logging.getLogger().level == logging.WARNING
        assert isinstance(handler.formatter, MillisecondFormatter)
        assert not handler.filters

    def test_setup_with_debug_subsystems(self):
        """Test debug subsystems lower the level and install a filter."""
        handler = setup_logging("INFO", {"registry"})
        handler._logstream_test = True

        assert logging.getLogger().level == logging.DEBUG
        assert handler.filters[0].logger_names == {"logstream.registry"}
