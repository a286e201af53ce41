"""Example stores built on the generic façade: library, payroll, counter."""

from . import counter, library, payroll

__all__ = ["counter", "library", "payroll"]
