# marketplace/api/auth/password_reset.py
import logging
from urllib.parse import urlencode

from flask import current_app

logger = logging.getLogger(__name__)


def reset_link(token):
    return f"{current_app.config['PASSWORD_RESET_URL']}?{urlencode({'token': token})}"


def deliver_password_reset(user, token):
    """Hand a reset link to the mail transport.

    This service does not send email; the link is built and the request is
    logged so a mail worker can be attached here.
    """
    link = reset_link(token)
    logger.info(f"Password reset link issued for user {user.id}")
    return link
