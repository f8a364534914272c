"""
Per-variant company settings.

Kiosks and displays read these on every refresh, so the payload is cached
(``SETTINGS_CACHE_SECONDS``) and invalidated on update.
"""
from __future__ import annotations

from django.conf import settings
from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..models import SiteSettings
from ..permissions import IsVariantAccount, manage_or_read
from ..serializers.common import SettingsSerializer
from ..services.audit import log_action
from ..services.formatting import format_settings
from ..services.uploads import validate_upload

ManageSettings = manage_or_read({'bank': 'Settings', 'hospital': 'manageSettings'})


def cache_key(variant: str) -> str:
    return f"settings:{variant}"


@api_view(['GET', 'PUT', 'POST'])
@permission_classes([IsVariantAccount, ManageSettings])
def site_settings(request, variant: str):
    """GET the settings record; PUT/POST update it (multipart for the logo)."""
    ck = cache_key(variant)
    if request.method == 'GET':
        cached = cache.get(ck)
        if cached:
            return Response(cached)
        obj = SiteSettings.objects.filter(variant=variant).first()
        payload = {'ok': True, 'data': format_settings(obj) if obj else None}
        cache.set(ck, payload, settings.SETTINGS_CACHE_SECONDS)
        return Response(payload)

    s = SettingsSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    obj, _ = SiteSettings.objects.get_or_create(variant=variant)
    for key, value in s.validated_data.items():
        setattr(obj, SettingsSerializer.FIELD_MAP[key], value)
    logo = request.FILES.get('logoImage')
    if logo is not None:
        validate_upload(logo, 'logoImage')
        if obj.logo_image:
            obj.logo_image.delete(save=False)
        obj.logo_image = logo
    obj.save()
    cache.delete(ck)
    log_action(user=request.user, action='settings_update', object_type='settings', object_id=variant,
               detail={'fields': sorted(s.validated_data.keys())})
    return Response({'ok': True, 'data': format_settings(obj)})
