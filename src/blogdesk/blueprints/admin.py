"""Admin panel: add and delete blog posts, manage subscriptions."""

from flask import flash, redirect, render_template, request, url_for
from flask.typing import ResponseReturnValue

from common.base.logging_config import get_logger
from common.config.blog_config import get_blog_config
from common.errors import BlogError
from common.validation import CATEGORIES
from models.blogs import create_blog, delete_blog, list_blogs
from models.database import db
from models.subscriptions import list_subscriptions, unsubscribe
from .shared import admin_bp, read_image_upload

logger = get_logger(__name__)

def _blank_form() -> dict:
    config = get_blog_config()
    return {
        'title': '',
        'description': '',
        'category': 'Startup',
        'author': config.default_author,
        'authorImg': config.default_author_img,
    }

def _render_add_form(form, status: int = 200) -> ResponseReturnValue:
    return render_template(
        'admin/add_blog.html',
        form=form,
        categories=CATEGORIES,
        max_upload_mb=get_blog_config().max_upload_bytes // (1024 * 1024)
    ), status

@admin_bp.route('/')
def home() -> ResponseReturnValue:
    return redirect(url_for('admin.add_blog'))

@admin_bp.route('/add', methods=['GET'])
def add_blog() -> ResponseReturnValue:
    """Display the blog submission form."""
    return _render_add_form(_blank_form())

@admin_bp.route('/add', methods=['POST'])
def submit_blog() -> ResponseReturnValue:
    """
    Process the blog submission form.

    On failure the form is shown again with the user's input intact.
    """
    image = read_image_upload(request.files.get('image'))
    try:
        with db.session() as db_session:
            blog = create_blog(db_session, request.form, image)
            blog_id = blog.id
    except BlogError as e:
        logger.info(f"Blog submission rejected: {e.message}")
        flash(e.message, 'error')
        return _render_add_form(request.form, e.status_code)

    flash('Blog Added', 'success')
    logger.info(f"Blog {blog_id} added from admin panel")
    return redirect(url_for('admin.add_blog'))

@admin_bp.route('/blogs')
def blog_list() -> ResponseReturnValue:
    with db.session() as db_session:
        blogs = list_blogs(db_session)
        return render_template('admin/blogs.html', blogs=blogs)

@admin_bp.route('/blogs/<blog_id>/delete', methods=['POST'])
def remove_blog(blog_id: str) -> ResponseReturnValue:
    try:
        with db.session() as db_session:
            delete_blog(db_session, blog_id)
        flash('Blog Deleted', 'success')
    except BlogError as e:
        flash(e.message, 'error')
    return redirect(url_for('admin.blog_list'))

@admin_bp.route('/subscriptions')
def subscription_list() -> ResponseReturnValue:
    with db.session() as db_session:
        emails = list_subscriptions(db_session)
        return render_template('admin/subscriptions.html', emails=emails)

@admin_bp.route('/subscriptions/<subscription_id>/delete', methods=['POST'])
def remove_subscription(subscription_id: str) -> ResponseReturnValue:
    try:
        with db.session() as db_session:
            unsubscribe(db_session, subscription_id)
        flash('Email Deleted', 'success')
    except BlogError as e:
        flash(e.message, 'error')
    return redirect(url_for('admin.subscription_list'))
