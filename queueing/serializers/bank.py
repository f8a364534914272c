import bleach
from rest_framework import serializers

from queueing.models import BankTicket, LANGUAGE_CHOICES


def clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


class BranchSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    address = serializers.CharField(max_length=255)
    localNetworkAddress = serializers.CharField(max_length=255, required=False, allow_blank=True)


class SubItemSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False)
    name = serializers.CharField(max_length=255)


class BankQueueSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    subItems = SubItemSerializer(many=True, required=False)


class TicketCreateSerializer(serializers.Serializer):
    queueId = serializers.IntegerField()
    subItemId = serializers.IntegerField(required=False, allow_null=True)
    issueDescription = serializers.CharField(max_length=2000)
    branchId = serializers.IntegerField()
    language = serializers.ChoiceField(choices=LANGUAGE_CHOICES, required=False)

    def validate_issueDescription(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('issue description is required')
        return v


class TicketUpdateSerializer(serializers.Serializer):
    ticketStatus = serializers.ChoiceField(choices=BankTicket.STATUS_CHOICES, required=False)
    issueDescription = serializers.CharField(max_length=2000, required=False)
    justifyReason = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    language = serializers.ChoiceField(choices=LANGUAGE_CHOICES, required=False)
    callAgain = serializers.BooleanField(required=False)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_issueDescription(self, v):
        return clean_text(v)

    def validate_justifyReason(self, v):
        return clean_text(v)


class TicketTransferSerializer(serializers.Serializer):
    queueId = serializers.IntegerField()
    subItemId = serializers.IntegerField(required=False, allow_null=True)
    issueDescription = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_issueDescription(self, v):
        return clean_text(v)


class CounterSelectSerializer(serializers.Serializer):
    counterNumber = serializers.IntegerField(min_value=1)
    queueId = serializers.IntegerField(required=False, allow_null=True)


class ExchangeRateSerializer(serializers.Serializer):
    countryName = serializers.CharField(max_length=100)
    countryCode = serializers.CharField(max_length=8)
    currencyCode = serializers.CharField(max_length=8)
    buyingRate = serializers.DecimalField(max_digits=14, decimal_places=4, min_value=0)
    sellingRate = serializers.DecimalField(max_digits=14, decimal_places=4, min_value=0)
