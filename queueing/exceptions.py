from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response


class InvalidTransition(APIException):
    """A ticket was asked to move to a status it cannot reach from its current one."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'invalid status transition'
    default_code = 'invalid_transition'


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'resource already taken'
    default_code = 'conflict'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    code = 'api_error'
    if isinstance(exc, (InvalidTransition, Conflict)):
        code = exc.default_code
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
