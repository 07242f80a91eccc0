"""
scriptdis Command-Line Interface
================================

This package provides the command-line driver for the disassembler
framework:

- **scriptdis**: engine listing and script disassembly

The tool is implemented as a Click-based CLI application with exit codes
defined in scriptdis.cli.errors.
"""

__all__ = ["scriptdis"]
