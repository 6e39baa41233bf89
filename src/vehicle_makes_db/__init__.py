"""Vehicle Makes DB - vPIC make/type synchronization and read APIs."""

__version__ = "0.1.0"
