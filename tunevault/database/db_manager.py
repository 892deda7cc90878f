# database/db_manager.py
from flask_sqlalchemy import SQLAlchemy
import os  # Import os for path handling
import logging
from datetime import datetime
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.engine import make_url
from sqlalchemy.orm import relationship

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown Artist"


class Track(db.Model):
    __tablename__ = 'tracks'

    id = db.Column(db.Integer, primary_key=True)
    # Stable key: the object key in the bucket. Uniqueness is the only guard
    # against concurrent syncs inserting the same object twice.
    source_key = db.Column(db.String(1024), unique=True, nullable=False, index=True)
    title = db.Column(db.String(512), nullable=False)
    artist = db.Column(db.String(512), nullable=False, default=UNKNOWN_ARTIST)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<Track {self.source_key!r}: {self.title} by {self.artist}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'source_key': self.source_key,
            'title': self.title,
            'artist': self.artist,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Playlist(db.Model):
    __tablename__ = 'playlists'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    # Deleting a playlist removes its membership rows, never the tracks.
    entries = relationship(
        'PlaylistTrack',
        back_populates='playlist',
        order_by='PlaylistTrack.position',
        cascade='all, delete-orphan',
        lazy='selectin',
    )

    def __repr__(self):
        return f'<Playlist {self.name!r} ({len(self.entries or [])} tracks)>'


class PlaylistTrack(db.Model):
    __tablename__ = 'playlist_tracks'

    id = db.Column(db.Integer, primary_key=True)
    playlist_id = db.Column(
        db.Integer,
        ForeignKey('playlists.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    track_id = db.Column(
        db.Integer,
        ForeignKey('tracks.id', ondelete='RESTRICT'),
        nullable=False,
        index=True,
    )
    position = db.Column(db.Integer, nullable=False, default=0)
    added_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    playlist = relationship('Playlist', back_populates='entries')
    track = relationship('Track', lazy='joined')

    __table_args__ = (
        UniqueConstraint('playlist_id', 'track_id', name='uq_playlist_track_once'),
    )


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates all database tables if they don't already exist.
    """
    db.init_app(app)
    # Ensure the instance folder exists for SQLite database file
    instance_path = app.instance_path
    if not os.path.exists(instance_path):
        os.makedirs(instance_path)
        logger.info("Created instance folder: %s", instance_path)

    # Ensure the directory for the configured SQLite file exists
    uri = app.config.get('SQLALCHEMY_DATABASE_URI')
    if uri:
        url = make_url(uri)
        # Only handle file-based SQLite (not :memory:)
        if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
            db_dir = os.path.dirname(url.database)
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir, exist_ok=True)
                logger.info("Created SQLite DB directory: %s", db_dir)

    # Create database tables within the application context
    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")


def dispose_database(app) -> None:
    """Release pooled connections; called on process shutdown."""
    with app.app_context():
        db.engine.dispose()
    logger.info("Database engine disposed.")
