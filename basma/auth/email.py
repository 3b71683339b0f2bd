from flask import current_app, url_for
from flask_mail import Message
from .. import mail


def send_reset_email(member):
    token = member.get_reset_token()
    msg = Message('Password Reset Request',
                  sender=current_app.config['MAIL_DEFAULT_SENDER'],
                  recipients=[member.email])

    reset_url = url_for('auth_bp.reset_token', token=token, _external=True)

    msg.body = f'''To reset your password, visit the following link:
{reset_url}

If you did not make this request then simply ignore this email and no changes will be made.
'''
    current_app.logger.debug(f"Password reset link for member {member.id}: {reset_url}")

    try:
        mail.send(msg)
    except Exception as e:
        current_app.logger.error(f"Error sending reset email to member {member.id}: {e}")
        raise
