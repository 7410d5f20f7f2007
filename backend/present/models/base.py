"""Base model class with common functionality."""
from datetime import datetime
from present import db

class BaseModel(db.Model):
    """Base model class with common fields and methods."""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    def delete(self) -> None:
        """Delete instance from database."""
        db.session.delete(self)
        db.session.commit()

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.id}>'
