from rest_framework import serializers
from .models import Permit


class PermitSerializer(serializers.ModelSerializer):
    permitNumber = serializers.CharField(source='permit_number', read_only=True)
    permitType = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()
    deathId = serializers.IntegerField(source='death_registration_id', read_only=True)
    registrationNumber = serializers.SerializerMethodField()
    deceased = serializers.SerializerMethodField()
    plotId = serializers.IntegerField(source='plot_id', read_only=True)
    requester = serializers.SerializerMethodField()
    amountDue = serializers.DecimalField(source='amount_due', max_digits=10, decimal_places=2, read_only=True)
    orNumber = serializers.CharField(source='or_number', read_only=True)
    issuedAt = serializers.DateTimeField(source='issued_at', read_only=True)
    expiryDate = serializers.DateField(source='expiry_date', read_only=True)
    pickupStatus = serializers.CharField(source='pickup_status', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Permit
        fields = ['id', 'permitNumber', 'permitType', 'status', 'deathId', 'registrationNumber', 'deceased',
                  'plotId', 'requester', 'amountDue', 'orNumber', 'issuedAt', 'expiryDate', 'pickupStatus',
                  'remarks', 'notes', 'createdAt', 'updatedAt']
        read_only_fields = fields

    def get_permitType(self, obj):
        return obj.permit_type.lower()

    def get_status(self, obj):
        return obj.status.lower()

    def get_registrationNumber(self, obj):
        return obj.death_registration.registration_number if obj.death_registration else None

    def get_deceased(self, obj):
        if obj.deceased is None:
            return None
        return {'id': obj.deceased.id, 'fullName': obj.deceased.full_name, 'dateOfDeath': obj.deceased.date_of_death}

    def get_requester(self, obj):
        if obj.requested_by is None:
            return None
        return {'id': obj.requested_by.id, 'name': obj.requested_by.full_name, 'email': obj.requested_by.email}


class PermitCreateSerializer(serializers.Serializer):
    REQUEST_DETAIL_LABELS = [
        ('requestedDate', 'Requested Date'),
        ('requestedTime', 'Requested Time'),
        ('plotPreference', 'Plot Preference'),
        ('specialRequests', 'Special Requests'),
        ('contactPerson', 'Contact Person'),
        ('contactNumber', 'Contact Number'),
    ]

    permitType = serializers.ChoiceField(choices=Permit.TYPE_CHOICES)
    deathId = serializers.IntegerField(required=False, allow_null=True)
    plotId = serializers.IntegerField(required=False, allow_null=True)
    requestedDate = serializers.DateField(required=False, allow_null=True)
    requestedTime = serializers.CharField(required=False, allow_blank=True)
    plotPreference = serializers.CharField(required=False, allow_blank=True)
    specialRequests = serializers.CharField(required=False, allow_blank=True)
    contactPerson = serializers.CharField(required=False, allow_blank=True)
    contactNumber = serializers.CharField(required=False, allow_blank=True)
    remarks = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        if hasattr(data, 'get') and isinstance(data.get('permitType'), str):
            data = {**data, 'permitType': data['permitType'].upper()}
        return super().to_internal_value(data)

    def build_remarks(self):
        """Fold the request details into one "Label: value" line each"""
        data = self.validated_data
        lines = [data['remarks']] if data.get('remarks') else []
        for key, label in self.REQUEST_DETAIL_LABELS:
            value = data.get(key)
            if value not in (None, ''):
                lines.append(f'{label}: {value}')
        return '\n'.join(lines)
