"""Exchange rates shown on bank hall displays."""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status

from ..models import ExchangeRate
from ..permissions import IsBankAccount, manage_or_read
from ..serializers.bank import ExchangeRateSerializer
from ..services.formatting import format_rate

ManageRates = manage_or_read('ExchangeRates')

FIELD_MAP = {
    'countryName': 'country_name',
    'countryCode': 'country_code',
    'currencyCode': 'currency_code',
    'buyingRate': 'buying_rate',
    'sellingRate': 'selling_rate',
}


@api_view(['GET', 'POST'])
@permission_classes([IsBankAccount, ManageRates])
def rates(request):
    if request.method == 'GET':
        return Response([format_rate(r) for r in ExchangeRate.objects.order_by('country_name')])
    s = ExchangeRateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    rate = ExchangeRate.objects.create(**{FIELD_MAP[k]: v for k, v in s.validated_data.items()})
    return Response(format_rate(rate), status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsBankAccount, ManageRates])
def rate_detail(request, rate_id: int):
    rate = ExchangeRate.objects.filter(id=rate_id).first()
    if not rate:
        return Response({'message': 'Exchange rate not found'}, status=status.HTTP_404_NOT_FOUND)
    if request.method == 'DELETE':
        rate.delete()
        return Response({'message': 'Exchange rate deleted successfully'})
    s = ExchangeRateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    for key, value in s.validated_data.items():
        setattr(rate, FIELD_MAP[key], value)
    rate.save()
    return Response(format_rate(rate))
