from rest_framework.throttling import SimpleRateThrottle


class _ScopedThrottle(SimpleRateThrottle):
    """Rate limit by user when authenticated, otherwise by client address.

    Function views cannot carry ``throttle_scope`` so each scope gets a
    small subclass used with ``@throttle_classes``.
    """

    def get_cache_key(self, request, view):
        user = getattr(request, 'user', None)
        ident = user.pk if user and user.is_authenticated else self.get_ident(request)
        return self.cache_format % {'scope': self.scope, 'ident': ident}


class LoginThrottle(_ScopedThrottle):
    scope = 'login'


class TicketCreateThrottle(_ScopedThrottle):
    scope = 'ticket_create'

    def allow_request(self, request, view):
        # Listing shares the endpoint; only issuing tickets is limited
        if request.method != 'POST':
            return True
        return super().allow_request(request, view)
