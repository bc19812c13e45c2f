"""A small kernel model: bitmaps, process control blocks, open-file tables, a process table and demand-paged virtual memory."""

__version__ = "0.1.0"