import re

from flask import Blueprint, current_app, jsonify, send_from_directory
from flask_mail import Message

from . import mail
from .exceptions import ValidationError
from .utils import get_request_data

public_bp = Blueprint('public_bp', __name__)

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


@public_bp.route('/api/contact', methods=['POST'])
def contact():
    """Website contact form, forwarded to the club mailbox."""
    data = get_request_data()
    name = (data.get('name') or '').strip()
    email = (data.get('email') or '').strip()
    subject = (data.get('subject') or '').strip() or 'Contact form'
    body = (data.get('message') or '').strip()

    errors = {}
    if not name:
        errors['name'] = 'required'
    if not EMAIL_RE.match(email):
        errors['email'] = 'invalid'
    if not body:
        errors['message'] = 'required'
    if len(body) > 5000:
        errors['message'] = 'too_long'
    if errors:
        raise ValidationError('Please fill in every field.', details=errors)

    msg = Message(f'[Contact] {subject}',
                  sender=current_app.config['MAIL_DEFAULT_SENDER'],
                  recipients=[current_app.config['CONTACT_RECIPIENT']],
                  reply_to=email)
    msg.body = f"From: {name} <{email}>\n\n{body}"

    try:
        mail.send(msg)
    except Exception as e:
        current_app.logger.error(f"Error sending contact email from {email}: {e}")
        raise

    current_app.logger.info(f"Contact message received from {email}")
    return jsonify({'success': True, 'message': 'Your message has been sent.'})


@public_bp.route('/uploads/<path:path>')
def uploaded_file(path):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], path)
