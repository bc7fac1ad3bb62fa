from datetime import datetime
import itertools
import os
import threading
import time
from typing import Any, Dict

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, validates

from common.base.logging_config import get_logger
from common.validation import DEFAULT_CATEGORY, normalize_category
logger = get_logger(__name__)

DEFAULT_AUTHOR = 'Anonymous'
DEFAULT_AUTHOR_IMG = '/default-author.png'

# ObjectId-style identifiers: 4-byte timestamp, 5 random bytes, 3-byte counter
_object_id_random = os.urandom(5)
_object_id_counter = itertools.count(int.from_bytes(os.urandom(3), 'big'))
_object_id_lock = threading.Lock()

def generate_object_id() -> str:
    """Generate a 24-character hex identifier, roughly ordered by creation time."""
    with _object_id_lock:
        counter = next(_object_id_counter) & 0xFFFFFF
    raw = int(time.time()).to_bytes(4, 'big') + _object_id_random + counter.to_bytes(3, 'big')
    return raw.hex()

class Base(DeclarativeBase):
    pass

class BlogPost(Base):
    """A published blog article."""
    __tablename__ = 'blogs'

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=generate_object_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, default=DEFAULT_CATEGORY, index=True)
    author: Mapped[str] = mapped_column(String(100), nullable=False, default=DEFAULT_AUTHOR)
    # Either a root-relative URL or a data: URI
    author_img: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_AUTHOR_IMG)
    image: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @validates('title', 'description')
    def validate_text(self, key, value):
        return value.strip() if value else value

    @validates('category')
    def validate_category(self, key, category):
        """Coerce unknown categories to the default."""
        return normalize_category(category)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'author': self.author,
            'authorImg': self.author_img,
            'image': self.image,
            'date': self.date.isoformat() if self.date else None,
        }

    def __repr__(self) -> str:
        return f"<BlogPost {self.id} {self.title!r}>"

class EmailSubscription(Base):
    """A newsletter subscriber. Addresses are unique at the storage layer."""
    __tablename__ = 'email_subscriptions'

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=generate_object_id)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'email': self.email,
            'date': self.date.isoformat() if self.date else None,
        }

    def __repr__(self) -> str:
        return f"<EmailSubscription {self.id} {self.email}>"
