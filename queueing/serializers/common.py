import bleach
from rest_framework import serializers


class SettingsSerializer(serializers.Serializer):
    companyName = serializers.CharField(max_length=255, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    contact = serializers.CharField(max_length=100, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    timezone = serializers.CharField(max_length=64, required=False, allow_blank=True)
    defaultLanguage = serializers.CharField(max_length=32, required=False, allow_blank=True)
    notificationText = serializers.CharField(max_length=2000, required=False, allow_blank=True)

    FIELD_MAP = {
        'companyName': 'company_name',
        'email': 'email',
        'contact': 'contact',
        'address': 'address',
        'timezone': 'timezone',
        'defaultLanguage': 'default_language',
        'notificationText': 'notification_text',
    }

    def validate_notificationText(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class UserSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, min_length=8)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    accountType = serializers.ChoiceField(choices=['admin', 'staff', 'kiosk', 'display'], required=False)
    roleId = serializers.IntegerField(required=False, allow_null=True)
    branchId = serializers.IntegerField(required=False, allow_null=True)
    departmentId = serializers.IntegerField(required=False, allow_null=True)
    isActive = serializers.BooleanField(required=False)


class RoleSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    permissions = serializers.DictField(child=serializers.BooleanField(), required=False)


class ActivityLogSerializer(serializers.Serializer):
    action = serializers.CharField(max_length=64)
    details = serializers.DictField(required=False)
    objectType = serializers.CharField(max_length=64, required=False, allow_blank=True)
    objectId = serializers.CharField(max_length=64, required=False, allow_blank=True)
