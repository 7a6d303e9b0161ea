"""psdvault - keep PSD design assets archived with PNG previews."""

__version__ = "0.1.0"
