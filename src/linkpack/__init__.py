"""linkpack - turn URL lists into portable link shortcut files."""

__version__ = "0.1.0"
