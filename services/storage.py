import json
import logging
import os
import tempfile
import threading
from contextlib import nullcontext
from datetime import datetime
from pathlib import Path

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import InvalidPeriod, MalformedImport, StaleDocument, StorageError
from models import db, TrackerDocument, DOCUMENT_ID
from services.document import Document, TrackingPeriod
from utils import current_date

logger = logging.getLogger(__name__)


def _build_document(data, today):
    try:
        return Document.from_dict(data, default_period=TrackingPeriod(today, today))
    except (MalformedImport, InvalidPeriod) as e:
        raise StorageError(f'Stored document is unreadable: {e.message}') from e


class SqlDocumentStore:
    """Keeps the document as JSON in a single database row.

    Every save bumps ``version`` and only succeeds if the row still has the
    version the document was loaded with.
    """

    def write_lock(self):
        return nullcontext()

    def _stale(self, document):
        db.session.rollback()
        logger.warning('Rejected stale write at version %s', document.version)
        return StaleDocument('Tracker data changed since it was loaded, reload and try again')

    def load(self, today=None):
        today = today or current_date()
        try:
            row = db.session.get(TrackerDocument, DOCUMENT_ID, populate_existing=True)
        except SQLAlchemyError as e:
            logger.exception('Failed to read tracker document')
            raise StorageError('Could not read tracker data') from e

        if row is None:
            return Document.empty(today)

        document = _build_document(row.payload, today)
        document.version = row.version
        return document

    def save(self, document):
        payload = document.to_dict()
        try:
            if document.version == 0:
                if db.session.get(TrackerDocument, DOCUMENT_ID) is not None:
                    raise self._stale(document)
                db.session.add(TrackerDocument(id=DOCUMENT_ID, payload=payload, version=1))
            else:
                result = db.session.execute(
                    update(TrackerDocument)
                    .where(TrackerDocument.id == DOCUMENT_ID, TrackerDocument.version == document.version)
                    .values(payload=payload, version=document.version + 1, updated_at=datetime.utcnow())
                )
                if result.rowcount != 1:
                    raise self._stale(document)
            db.session.commit()
        except IntegrityError as e:
            # Another writer inserted the row between our check and the commit
            raise self._stale(document) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception('Failed to write tracker document')
            raise StorageError('Could not save tracker data') from e

        document.version += 1


class JsonFileStore:
    """Reads and writes the document as a pretty-printed JSON file."""

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.RLock()

    def write_lock(self):
        return self._lock

    def load(self, today=None):
        today = today or current_date()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return Document.empty(today)
        except (OSError, ValueError) as e:
            logger.exception('Failed to read %s', self.path)
            raise StorageError(f'Could not read {self.path.name}') from e

        if data is None:
            return Document.empty(today)
        return _build_document(data, today)

    def save(self, document):
        with self._lock:
            directory = self.path.parent
            tmp_path = None
            try:
                directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f'.{self.path.name}.', suffix='.tmp')
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(document.to_dict(), f, indent=4, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except OSError as e:
                if tmp_path and os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                logger.exception('Failed to write %s', self.path)
                raise StorageError(f'Could not save {self.path.name}') from e


def get_store(app=None):
    """Store for the app's configured backend, created once per backend."""
    app = app or current_app
    backend = app.config.get('TRACKER_STORAGE', 'sql')
    if backend == 'sql':
        key = ('sql', None)
    elif backend == 'json':
        key = ('json', str(app.config.get('TRACKER_DATA_FILE', 'data.json')))
    else:
        raise ValueError(f'Unknown TRACKER_STORAGE backend: {backend}')

    stores = app.extensions.setdefault('tracker_stores', {})
    if key not in stores:
        stores[key] = SqlDocumentStore() if backend == 'sql' else JsonFileStore(key[1])
    return stores[key]
