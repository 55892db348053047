"""appforge - natural-language application generation."""

__version__ = "0.1.0"
