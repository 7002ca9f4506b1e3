"""
Workstation initialisation.

Applies a fixed, individually toggleable sequence of host configuration
steps to a fresh Ubuntu-family workstation and reports what was applied.
"""

__version__ = "1.0.0"
