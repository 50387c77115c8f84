"""Off-chain transaction builders for the freezer validator."""

__version__ = "0.1.0"
