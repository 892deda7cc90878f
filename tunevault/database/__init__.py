from .db_manager import db, Track, Playlist, PlaylistTrack, initialize_database, dispose_database  # noqa: F401
