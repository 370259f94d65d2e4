"""External validation of clusterings against gold-standard classes."""

__version__ = "0.1.0"
