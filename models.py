from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

db = SQLAlchemy()

# The whole tracker lives in a single row
DOCUMENT_ID = 1

class TrackerDocument(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    payload = db.Column(db.JSON, nullable=False)
    version = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
