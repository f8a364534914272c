"""
Advertisement endpoints.

Ads are images rotated on the hall displays of one variant.  Any signed-in
account of that variant may list them; uploads and deletes need the
variant's ads permission.
"""
from __future__ import annotations

import bleach
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status

from ..models import Ad
from ..permissions import IsVariantAccount, manage_or_read
from ..services.formatting import format_ad
from ..services.uploads import validate_upload

ManageAds = manage_or_read({'bank': 'Ads', 'hospital': 'manageAds'})


@api_view(['GET', 'POST'])
@permission_classes([IsVariantAccount, ManageAds])
def ads(request, variant: str):
    if request.method == 'GET':
        return Response([format_ad(a) for a in Ad.objects.filter(variant=variant).order_by('-created_at')])
    name = bleach.clean((request.data.get('name') or '').strip(), strip=True)
    if not name:
        return Response({'detail': 'name is required'}, status=status.HTTP_400_BAD_REQUEST)
    image = validate_upload(request.FILES.get('image'))
    ad = Ad.objects.create(variant=variant, name=name, image=image)
    return Response(format_ad(ad), status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsVariantAccount, ManageAds])
def ad_detail(request, variant: str, ad_id: int):
    ad = Ad.objects.filter(id=ad_id, variant=variant).first()
    if not ad:
        return Response({'detail': 'Ad not found'}, status=status.HTTP_404_NOT_FOUND)
    if ad.image:
        ad.image.delete(save=False)
    ad.delete()
    return Response({'success': True})
