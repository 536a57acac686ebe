"""
Module registry for logstream subsystems.

Each subsystem owns a named logger and a CLI debug flag so debug output
can be enabled per subsystem.
"""

import logging
from typing import Dict, Set


class ModuleRegistry:
    """Registry of subsystems with their loggers and debug flags."""

    def __init__(self):
        """Initialize the module registry with the built-in subsystems."""
        self._modules: Dict[str, dict] = {}
        self._register_builtin_modules()

    def _register_builtin_modules(self):
        """Register the built-in subsystems."""
        self.register_module(
            name="registry",
            description="Log stream registry lifecycle (register, update, deregister)",
            logger_name="logstream.registry",
            debug_flag="--debug-registry",
        )
        self.register_module(
            name="sources",
            description="Log page fetching from memory, replay and HTTP sources",
            logger_name="logstream.sources",
            debug_flag="--debug-sources",
        )
        self.register_module(
            name="capture",
            description="Log stream capture files",
            logger_name="logstream.capture",
            debug_flag="--debug-capture",
        )
        self.register_module(
            name="mcp",
            description="MCP tool server",
            logger_name="logstream.mcp",
            debug_flag="--debug-mcp",
        )

    def register_module(
        self,
        name: str,
        description: str,
        logger_name: str,
        debug_flag: str,
    ):
        """Register a subsystem with essential metadata."""
        self._modules[name] = {
            "description": description,
            "logger_name": logger_name,
            "debug_flag": debug_flag,
            "logger": logging.getLogger(logger_name),
        }

    def get_module_names(self) -> Set[str]:
        """Get all subsystem names."""
        return set(self._modules.keys())

    def get_logger(self, name: str) -> logging.Logger:
        """Get the logger of a subsystem, falling back to a logger of the same name."""
        info = self._modules.get(name)
        if info is None:
            return logging.getLogger(name)
        return info["logger"]

    def get_debug_logger_names(self, names=None) -> Set[str]:
        """Get logger names for debug filtering, optionally restricted to ``names``."""
        return {
            info["logger_name"]
            for name, info in self._modules.items()
            if names is None or name in names
        }

    def get_debug_flags(self) -> Dict[str, str]:
        """Get mapping of debug CLI flags to subsystem names."""
        return {info["debug_flag"]: name for name, info in self._modules.items()}

    def get_module_info(self, name: str) -> dict:
        """Get information about a specific subsystem."""
        return self._modules.get(name, {})


# Global registry instance
module_registry = ModuleRegistry()
