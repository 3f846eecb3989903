"""ShortCuts: find short-form clip ideas in long videos and publish them to YouTube."""

__version__ = "0.1.0"
