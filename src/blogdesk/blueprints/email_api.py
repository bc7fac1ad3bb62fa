"""JSON API for email subscriptions: /api/email."""

from flask import jsonify, request
from flask.typing import ResponseReturnValue

from models.database import db
from models.subscriptions import list_subscriptions, subscribe, unsubscribe
from .shared import api_bp

@api_bp.route('/api/email', methods=['GET'])
def fetch_emails() -> ResponseReturnValue:
    """List subscriptions, newest first."""
    with db.session() as db_session:
        emails = list_subscriptions(db_session)
        return jsonify({'success': True, 'emails': [email.to_dict() for email in emails]})

@api_bp.route('/api/email', methods=['POST'])
def add_email() -> ResponseReturnValue:
    """
    Subscribe an address, sent as JSON or as a form field named ``email``.

    :return: {success, msg} with HTTP 201
    :raises: HTTP 400 for a missing or malformed address, 409 if already subscribed
    """
    if request.is_json:
        payload = request.get_json(silent=True)
        email = payload.get('email') if isinstance(payload, dict) else None
    else:
        email = request.form.get('email')

    with db.session() as db_session:
        subscribe(db_session, email)
    return jsonify({'success': True, 'msg': 'Email Subscribed'}), 201

@api_bp.route('/api/email', methods=['DELETE'])
def remove_email() -> ResponseReturnValue:
    """
    Delete the subscription named by the ``id`` query parameter.

    :raises: HTTP 400 if the id is missing or malformed, 404 if it matches nothing
    """
    with db.session() as db_session:
        unsubscribe(db_session, request.args.get('id'))
    return jsonify({'success': True, 'msg': 'Email Deleted'})
