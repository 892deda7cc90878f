"""TuneVault: a track catalog and playlists backed by an object-store bucket."""

__version__ = "0.1.0"
