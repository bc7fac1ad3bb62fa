"""JSON API for blog posts: /api/blog."""

from flask import jsonify, request
from flask.typing import ResponseReturnValue

from common.base.logging_config import get_logger
from models.blogs import create_blog, delete_blog, get_blog, list_blogs
from models.database import db
from .shared import api_bp, read_image_upload

logger = get_logger(__name__)

@api_bp.route('/api/blog', methods=['GET'])
def fetch_blogs() -> ResponseReturnValue:
    """
    List all blog posts, or fetch one when an ``id`` query parameter is given.

    :return: {success, blog} or {success, blogs}
    :raises: HTTP 400 if the id is malformed, 404 if it matches nothing
    """
    blog_id = request.args.get('id')
    with db.session() as db_session:
        if blog_id is not None:
            blog = get_blog(db_session, blog_id)
            return jsonify({'success': True, 'blog': blog.to_dict()})

        blogs = list_blogs(db_session, request.args.get('category'))
        return jsonify({'success': True, 'blogs': [blog.to_dict() for blog in blogs]})

@api_bp.route('/api/blog', methods=['POST'])
def add_blog() -> ResponseReturnValue:
    """
    Create a blog post from a multipart form.

    Fields: title, description, category, author, authorImg, image (file).

    :return: {success, msg, blog}
    :raises: HTTP 400 on validation failure, 409 on duplicate,
             507 when storage is full, 500 on storage or database failure
    """
    image = read_image_upload(request.files.get('image'))
    with db.session() as db_session:
        blog = create_blog(db_session, request.form, image)
        return jsonify({
            'success': True,
            'msg': 'Blog Added',
            'blog': blog.to_dict()
        })

@api_bp.route('/api/blog', methods=['DELETE'])
def remove_blog() -> ResponseReturnValue:
    """
    Delete the blog post named by the ``id`` query parameter.

    :return: {success, msg}
    :raises: HTTP 400 if the id is missing or malformed, 404 if it matches nothing
    """
    with db.session() as db_session:
        delete_blog(db_session, request.args.get('id'))
    return jsonify({'success': True, 'msg': 'Blog Deleted'})
