"""
Result source implementations.

Provides implementations of the ResultSource interface for discovering
tournament result files.

Available implementations:
- DirectoryResultSource: Walks <root>/<level>/**/<date>*.tsv
- MemoryResultSource: Serves result files held in memory
"""

from .directory_source import DirectoryResultSource, read_result_lines
from .memory_source import MemoryResultSource

__all__ = ["DirectoryResultSource", "MemoryResultSource", "read_result_lines"]
