"""Italian capital gains and investment income tax engine."""

__version__ = "0.1.0"
