"""filetidy - explainable, reversible file organization."""

__version__ = "0.1.0"
