"""YouTube OAuth connection and resumable upload."""
