"""Command-line tools for inspecting processes and kernel state: slabtop, snice, sysctl, watch, top and w."""

__version__ = "0.1.0"