import bleach
from rest_framework import serializers

from queueing.models import HospitalTicket, LANGUAGE_CHOICES


def clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


class _ReceptionFields(serializers.Serializer):
    """Reception fields accepted by the routing endpoints."""
    userType = serializers.ChoiceField(choices=HospitalTicket.USER_TYPE_CHOICES, required=False, allow_blank=True)
    patientName = serializers.CharField(max_length=255, required=False, allow_blank=True)
    reasonForVisit = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    receptionistNote = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    departmentNote = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    currentDepartment = serializers.CharField(max_length=100, required=False, allow_blank=True)
    roomId = serializers.IntegerField(required=False, allow_null=True)

    def validate_patientName(self, v):
        return clean_text(v)

    def validate_reasonForVisit(self, v):
        return clean_text(v)

    def validate_receptionistNote(self, v):
        return clean_text(v)

    def validate_departmentNote(self, v):
        return clean_text(v)

    def reception_fields(self):
        vd = self.validated_data
        return {k: vd.get(k) for k in ('userType', 'patientName', 'reasonForVisit', 'receptionistNote')}


class PlannedStepSerializer(serializers.Serializer):
    departmentId = serializers.IntegerField()
    roomId = serializers.IntegerField(required=False, allow_null=True)


class NextStepSerializer(_ReceptionFields):
    departmentId = serializers.IntegerField(required=False, allow_null=True)
    departments = PlannedStepSerializer(many=True, required=False)
    cashCleared = serializers.CharField(max_length=10, required=False, allow_blank=True, allow_null=True)
    currentDepartment = serializers.CharField(max_length=100)


class AdvanceQueueSerializer(serializers.Serializer):
    currentDepartment = serializers.CharField(max_length=100, required=False, allow_blank=True)
    departmentNote = serializers.CharField(max_length=2000, required=False, allow_blank=True)

    def validate_departmentNote(self, v):
        return clean_text(v)


class NextSerializer(_ReceptionFields):
    nextDepartmentId = serializers.IntegerField()
    currentDepartment = serializers.CharField(max_length=100)


class ClearSerializer(_ReceptionFields):
    currentDepartment = serializers.CharField(max_length=100)


class AssignRoomSerializer(serializers.Serializer):
    roomId = serializers.IntegerField()
    department = serializers.CharField(max_length=100)


class TicketUpdateSerializer(serializers.Serializer):
    call = serializers.BooleanField(required=False)
    noShow = serializers.BooleanField(required=False)
    held = serializers.BooleanField(required=False)
    emergency = serializers.BooleanField(required=False)
    reasonForVisit = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    receptionistNote = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    patientName = serializers.CharField(max_length=255, required=False, allow_blank=True)
    userType = serializers.ChoiceField(choices=HospitalTicket.USER_TYPE_CHOICES, required=False, allow_blank=True)
    language = serializers.ChoiceField(choices=LANGUAGE_CHOICES, required=False)
    currentDepartment = serializers.CharField(max_length=100, required=False, allow_blank=True)
    departmentNote = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    roomId = serializers.IntegerField(required=False, allow_null=True)

    FIELD_MAP = {
        'call': 'call',
        'noShow': 'no_show',
        'held': 'held',
        'emergency': 'emergency',
        'reasonForVisit': 'reason_for_visit',
        'receptionistNote': 'receptionist_note',
        'patientName': 'patient_name',
        'userType': 'user_type',
        'language': 'language',
    }

    def validate_reasonForVisit(self, v):
        return clean_text(v)

    def validate_receptionistNote(self, v):
        return clean_text(v)

    def validate_patientName(self, v):
        return clean_text(v)

    def validate_departmentNote(self, v):
        return clean_text(v)

    def model_changes(self):
        vd = self.validated_data
        return {attr: vd[key] for key, attr in self.FIELD_MAP.items() if key in vd}


class ClearPaymentSerializer(serializers.Serializer):
    department = serializers.CharField(max_length=100, required=False, allow_blank=True)
    clearAll = serializers.BooleanField(required=False, default=False)


class DepartmentTitlesSerializer(serializers.Serializer):
    departments = serializers.ListField(child=serializers.CharField(max_length=100), allow_empty=True)


class SelectedDepartmentsSerializer(serializers.Serializer):
    selectedDepartments = serializers.ListField(child=serializers.CharField(max_length=100), allow_empty=True)


class DepartmentCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=100)
    icon = serializers.CharField(max_length=16, required=False, allow_blank=True)
    category = serializers.CharField(max_length=50, required=False, allow_blank=True)


class RoomActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['addRoom', 'updateRoom', 'deleteRoom'])
    roomId = serializers.IntegerField(required=False)
    roomNumber = serializers.CharField(max_length=20, required=False, allow_blank=True)
    staffId = serializers.IntegerField(required=False, allow_null=True)
    available = serializers.BooleanField(required=False)
    isActive = serializers.BooleanField(required=False)


class RoomSelectSerializer(serializers.Serializer):
    departmentId = serializers.IntegerField()
    roomNumber = serializers.CharField(max_length=20)


class RoomUpdateSerializer(serializers.Serializer):
    available = serializers.BooleanField(required=False)
    currentTicketId = serializers.IntegerField(required=False, allow_null=True)
    isActive = serializers.BooleanField(required=False)


class EventSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    date = serializers.DateTimeField()

    def validate_title(self, v):
        return clean_text(v)
