"""Bearer token authentication for DRF.

Invalid or expired tokens leave the request anonymous; views that require
a user reject it through their permission classes.

Session tokens authenticate everywhere. Guest tokens are only honoured by
views that list GuestTokenAuthentication explicitly.
"""

import logging
from uuid import UUID

from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.request import Request

from accounts.models import User
from accounts.tokens import GUEST, SESSION, decode_token

logger = logging.getLogger(__name__)


class BearerTokenAuthentication(BaseAuthentication):
    keyword = b"bearer"
    token_kind = SESSION

    def authenticate(self, request: Request):
        parts = get_authorization_header(request).split()
        if len(parts) != 2 or parts[0].lower() != self.keyword:
            return None

        claims = decode_token(parts[1].decode("latin-1"))
        if claims is None:
            logger.info("Ignoring invalid or expired bearer token")
            return None
        if claims.get("kind") != self.token_kind:
            return None

        try:
            user_id = UUID(str(claims.get("sub")))
        except ValueError:
            return None

        user = User.objects.filter(pk=user_id, is_active=True).first()
        if user is None:
            logger.info("Bearer token refers to unknown user %s", claims.get("sub"))
            return None
        return user, claims

    def authenticate_header(self, request: Request) -> str:
        return "Bearer"


class GuestTokenAuthentication(BearerTokenAuthentication):
    """Accepts the short-lived guest tokens handed out by paid public registration.

    request.auth holds the claims; the view must check ``webinar_id``.
    """

    token_kind = GUEST
