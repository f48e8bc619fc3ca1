"""PhpHive CLI — scaffold and manage PHP monorepos."""

__version__ = "0.1.0"
