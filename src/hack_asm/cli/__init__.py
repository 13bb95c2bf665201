"""
Hack Assembler Command-Line Interface
=====================================

- **hackasm**: Hack assembler

The tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["hackasm"]
