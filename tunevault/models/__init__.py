from .dto import ObjectSummary, PlaylistView, SyncResult, TrackView, UploadResult  # noqa: F401
