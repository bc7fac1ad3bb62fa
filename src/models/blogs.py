"""
Blog post persistence: create, list, fetch and delete.

Creation is all-or-nothing from the caller's point of view. Inputs are
validated before anything is written; if the database write fails after
the image was stored, the stored image is removed again (best effort)
before the error propagates.
"""

from typing import List, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from common.base.logging_config import get_logger
from common.config.blog_config import BlogConfig, get_blog_config
from common.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from common.images import ImageNormalizationError, normalize_image, normalized_filename
from common.storage import ImageStore, get_image_store
from common.validation import (
    CATEGORIES,
    ImageUpload,
    validate_image,
    validate_object_id,
    validate_submission
)
from models.models import BlogPost

logger = get_logger(__name__)

def _normalize_upload(image: ImageUpload, config: BlogConfig) -> ImageUpload:
    try:
        normalized = normalize_image(
            image.data,
            max_bytes=config.normalized_max_bytes,
            max_dimension=config.normalized_max_dimension
        )
    except ImageNormalizationError as e:
        raise ValidationError("Image could not be processed", field='image', details=str(e)) from e
    if normalized.oversized:
        logger.warning(f"Storing {image.filename!r} above the normalized size budget ({normalized.size} bytes)")
    return ImageUpload(
        filename=normalized_filename(image.filename),
        mimetype=normalized.mimetype,
        data=normalized.data
    )

def _discard_image(image_store: ImageStore, reference: str) -> None:
    """Remove an image whose blog record was never written."""
    try:
        image_store.delete(reference)
    except Exception as e:
        logger.error(f"Cleanup of orphaned image failed: {e}")

def create_blog(
    db_session: Session,
    fields: Mapping[str, Optional[str]],
    image: Optional[ImageUpload],
    image_store: Optional[ImageStore] = None,
    config: Optional[BlogConfig] = None
) -> BlogPost:
    """
    Validate a submission, store its image and write the blog record.

    :param db_session: SQLAlchemy session
    :param fields: title, description, category, author, authorImg
    :param image: The uploaded cover image
    :param image_store: Storage backend, defaults to the global one
    :param config: Blog configuration, defaults to the global one
    :return: The persisted BlogPost
    :raises: ValidationError before any write if the input is invalid
    :raises: StorageExhaustedError or PersistenceError if storing fails
    :raises: ConflictError if the database rejects the record as a duplicate
    """
    config = config or get_blog_config()
    submission = validate_submission(fields)
    image = validate_image(image, config.allowed_image_types, config.max_upload_bytes)

    if config.normalize_uploads:
        image = _normalize_upload(image, config)

    image_store = image_store or get_image_store()
    reference = image_store.store(image.data, image.filename, image.mimetype)

    blog = BlogPost(
        title=submission.title,
        description=submission.description,
        category=submission.category,
        author=submission.author or config.default_author,
        author_img=submission.author_img or config.default_author_img,
        image=reference
    )

    try:
        db_session.add(blog)
        db_session.commit()
    except IntegrityError as e:
        db_session.rollback()
        _discard_image(image_store, reference)
        raise ConflictError("A blog post with these details already exists", details=str(e)) from e
    except SQLAlchemyError as e:
        db_session.rollback()
        logger.error(f"Failed to save blog {submission.title!r}: {e}")
        _discard_image(image_store, reference)
        raise PersistenceError("Failed to add blog", details=str(e)) from e

    logger.info(f"Created blog {blog.id} ({blog.category}): {blog.title!r}")
    return blog

def list_blogs(db_session: Session, category: Optional[str] = None) -> List[BlogPost]:
    """
    List blog posts, newest first.

    :param category: Optional category filter; unknown categories match nothing
    """
    query = db_session.query(BlogPost)
    if category:
        if category not in CATEGORIES:
            return []
        query = query.filter(BlogPost.category == category)
    return query.order_by(BlogPost.date.desc(), BlogPost.id.desc()).all()

def get_blog(db_session: Session, blog_id: Optional[str]) -> BlogPost:
    """
    Fetch one blog post.

    :raises: ValidationError if blog_id is not a 24-character hex string
    :raises: NotFoundError if no post has this id
    """
    blog_id = validate_object_id(blog_id, 'blog ID')
    blog = db_session.get(BlogPost, blog_id)
    if blog is None:
        raise NotFoundError("Blog not found")
    return blog

def delete_blog(db_session: Session, blog_id: Optional[str], image_store: Optional[ImageStore] = None) -> None:
    """
    Delete a blog post and, best effort, its stored cover image.

    A failed image deletion is logged and does not stop the record from
    being deleted.

    :raises: ValidationError, NotFoundError as get_blog
    :raises: PersistenceError if the database delete fails
    """
    blog = get_blog(db_session, blog_id)
    image_store = image_store or get_image_store()
    _discard_image(image_store, blog.image)

    try:
        db_session.delete(blog)
        db_session.commit()
    except SQLAlchemyError as e:
        db_session.rollback()
        logger.error(f"Failed to delete blog {blog_id}: {e}")
        raise PersistenceError("Failed to delete blog", details=str(e)) from e

    logger.info(f"Deleted blog {blog_id}")
