"""Keep pull request branches linear while updating and merging them."""

__version__ = "0.1.0"
