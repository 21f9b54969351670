"""Pin GitHub Actions references to immutable commit SHAs."""

__version__ = "0.1.0"
