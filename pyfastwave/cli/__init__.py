"""
Command Line Interface for PyFastWave

This module provides command line utilities for PyFastWave, enabling
easy access to common operations from the terminal without writing Python scripts.

Available Commands:
- simulate: Run a water scenario and save the final surface
- height2png: Convert a saved surface to PNG format

Author: B.G.
"""

_CLI_SUBMODULES = {
    "simulate": (".simulate_commands", "simulate"),
    "height2png": (".height2png_commands", "height2png"),
}

__all__ = list(_CLI_SUBMODULES.keys())


def __getattr__(name):
    info = _CLI_SUBMODULES.get(name)
    if info is None:
        raise AttributeError(name)
    pkg, attr = info
    import importlib
    mod = importlib.import_module(pkg, __package__)
    obj = getattr(mod, attr)
    globals()[name] = obj
    return obj
