"""
Custom authentication backend for token-based auth.

Kept apart from the view modules so that Django REST framework can
import it during initialisation without pulling in models or views.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """Token authentication using the ``Token`` keyword.

    Kiosks and hall displays keep a long-lived DRF token; browsers use
    the simplejwt pair issued by the same login call.
    """

    keyword = 'Token'
