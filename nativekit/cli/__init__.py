"""
Command-line interface for NativeKit.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
