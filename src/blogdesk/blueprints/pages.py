"""Public blog pages: listing, detail and the subscribe form."""

from flask import flash, redirect, render_template, request, url_for
from flask.typing import ResponseReturnValue

from common.base.logging_config import get_logger
from common.errors import ConflictError, ValidationError
from common.validation import CATEGORIES
from models.blogs import get_blog, list_blogs
from models.database import db
from models.subscriptions import subscribe
from .shared import pages_bp

logger = get_logger(__name__)

@pages_bp.route('/')
def index() -> ResponseReturnValue:
    """Blog listing with category tabs."""
    category = request.args.get('category')
    if category == 'All':
        category = None

    with db.session() as db_session:
        blogs = list_blogs(db_session, category)
        return render_template(
            'blog/index.html',
            blogs=blogs,
            categories=CATEGORIES,
            current_category=category or 'All'
        )

@pages_bp.route('/blogs/<blog_id>')
def show_blog(blog_id: str) -> ResponseReturnValue:
    """A single blog post."""
    with db.session() as db_session:
        blog = get_blog(db_session, blog_id)
        return render_template('blog/detail.html', blog=blog)

@pages_bp.route('/subscribe', methods=['POST'])
def subscribe_form() -> ResponseReturnValue:
    """Handle the subscribe form on the listing page."""
    try:
        with db.session() as db_session:
            subscribe(db_session, request.form.get('email'))
        flash('Email Subscribed', 'success')
    except (ValidationError, ConflictError) as e:
        flash(e.message, 'error')
    return redirect(url_for('pages.index'))
