"""Hozumi: a terminal typewriter that never stops typing."""

__version__ = "2.0.0"

PROGRAM_NAME = "Hozumi Command"
