"""
Authentication views and session helpers.

One login endpoint serves every client: administrators and staff on the
dashboards, tellers and serving screens, kiosks and hall displays.  The
response carries both a DRF token (kiosks and displays keep it) and a
simplejwt pair for browsers.  Login never grants more than the stored
account type; request fields such as ``role`` are ignored.
"""
from __future__ import annotations

from django.contrib.auth import authenticate
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from queueing.serializers.auth import LoginSerializer, RefreshSerializer
from queueing.services.audit import log_action
from queueing.services.formatting import format_counter, format_room, format_user
from queueing.services.service_points import active_counter, active_room
from queueing.throttles import LoginThrottle

from .models import User


def session_payload(user: User) -> dict:
    """Describe the signed-in account for the client."""
    payload: dict[str, object] = {
        'isLoggedIn': True,
        'user': format_user(user),
        'variant': user.variant,
        'accountType': user.account_type,
        'permissions': (user.role.permissions if user.role_id else {}) or {},
        'isAdmin': user.is_admin,
    }
    if user.variant == 'bank':
        payload['branchId'] = user.branch_id
        payload['counter'] = format_counter(active_counter(user))
    else:
        payload['departmentId'] = user.department_id
        room = active_room(user)
        payload['room'] = format_room(room)
        payload['department'] = room.department.title if room else (user.department.title if user.department_id else None)
    return payload


# ---------------------------------------------------------------------
# Username/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginThrottle])
def login_view(request):
    """
    Login with username/password.

    ``variant`` (bank/hospital) is optional; when given, accounts of the
    other variant are refused so a teller cannot sign in to a hospital
    serving screen by mistake.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    ip = request.META.get('REMOTE_ADDR')

    user = authenticate(request, username=vd['username'], password=vd['password'])
    if not user:
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': vd['username'], 'ip': ip})
        return Response({'ok': False, 'detail': 'invalid username or password'}, status=400)

    variant = vd.get('variant')
    if variant and user.variant != variant and not user.is_superuser:
        log_action(user=user, action='login', object_type='user', object_id=user.id,
                   detail={'result': 'wrong_variant', 'variant': variant, 'ip': ip})
        return Response({'ok': False, 'detail': f'account is not a {variant} account'}, status=400)

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)

    payload = session_payload(user)
    payload.update({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
    })
    return Response(payload, status=200)


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    s = RefreshSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        refresh = RefreshToken(s.validated_data['refresh'])
    except TokenError as e:
        return Response({'ok': False, 'detail': str(e)}, status=401)
    return Response({'ok': True, 'jwt_access': str(refresh.access_token)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the user.

    The DRF token is deleted too so kiosks have to sign in again.
    """
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            return Response({'ok': False, 'detail': str(e)}, status=400)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def session_view(request):
    """Return the current account, its permissions and service point."""
    return Response(session_payload(request.user))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def permissions_view(request):
    """Return the permission flags of the current account's role."""
    user: User = request.user  # type: ignore[assignment]
    permissions = (user.role.permissions if user.role_id else {}) or {}
    return Response({'permissions': permissions, 'isAdmin': user.is_admin})
