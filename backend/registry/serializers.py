from rest_framework import serializers
from .models import DeceasedRecord, DeathRegistration, RegistrationDocument


class DeceasedRecordSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source='first_name', max_length=100)
    middleName = serializers.CharField(source='middle_name', max_length=100, required=False, allow_blank=True)
    lastName = serializers.CharField(source='last_name', max_length=100)
    fullName = serializers.CharField(source='full_name', read_only=True)
    dateOfBirth = serializers.DateField(source='date_of_birth')
    dateOfDeath = serializers.DateField(source='date_of_death')
    civilStatus = serializers.CharField(source='civil_status', max_length=30, required=False)
    placeOfDeath = serializers.CharField(source='place_of_death', max_length=255, required=False, allow_blank=True)
    causeOfDeath = serializers.CharField(source='cause_of_death', required=False, allow_blank=True)
    residenceAddress = serializers.CharField(source='residence_address', required=False, allow_blank=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = DeceasedRecord
        fields = ['id', 'firstName', 'middleName', 'lastName', 'suffix', 'fullName', 'sex',
                  'dateOfBirth', 'dateOfDeath', 'age', 'civilStatus', 'citizenship', 'occupation',
                  'religion', 'placeOfDeath', 'causeOfDeath', 'residenceAddress', 'createdAt']
        read_only_fields = ['age']

    def to_internal_value(self, data):
        if hasattr(data, 'get') and isinstance(data.get('sex'), str):
            data = {**data, 'sex': data['sex'].upper()}
        return super().to_internal_value(data)

    def validate(self, attrs):
        dob = attrs.get('date_of_birth', getattr(self.instance, 'date_of_birth', None))
        dod = attrs.get('date_of_death', getattr(self.instance, 'date_of_death', None))
        if dob and dod and dod < dob:
            raise serializers.ValidationError({'dateOfDeath': 'Date of death cannot be before date of birth'})
        return attrs


class RegistrationDocumentSerializer(serializers.ModelSerializer):
    docType = serializers.CharField(source='doc_type', read_only=True)
    originalName = serializers.CharField(source='original_name', read_only=True)
    mimeType = serializers.CharField(source='mime_type', read_only=True)
    uploadedAt = serializers.DateTimeField(source='uploaded_at', read_only=True)
    url = serializers.SerializerMethodField()

    class Meta:
        model = RegistrationDocument
        fields = ['id', 'docType', 'originalName', 'mimeType', 'size', 'url', 'uploadedAt']

    def get_url(self, obj):
        return obj.file.url if obj.file else None


class DeathRegistrationSerializer(serializers.ModelSerializer):
    registrationNumber = serializers.CharField(source='registration_number', read_only=True)
    registrationType = serializers.CharField(source='registration_type', read_only=True)
    deceased = DeceasedRecordSerializer(read_only=True)
    submittedBy = serializers.SerializerMethodField()
    informantName = serializers.CharField(source='informant_name', read_only=True)
    informantRelationship = serializers.CharField(source='informant_relationship', read_only=True)
    informantAddress = serializers.CharField(source='informant_address', read_only=True)
    informantContact = serializers.CharField(source='informant_contact', read_only=True)
    amountDue = serializers.DecimalField(source='amount_due', max_digits=10, decimal_places=2, read_only=True)
    orNumber = serializers.CharField(source='or_number', read_only=True)
    processingDueDate = serializers.DateField(source='processing_due_date', read_only=True)
    verifiedAt = serializers.DateTimeField(source='verified_at', read_only=True)
    registeredAt = serializers.DateTimeField(source='registered_at', read_only=True)
    pickupStatus = serializers.CharField(source='pickup_status', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = DeathRegistration
        fields = ['id', 'registrationNumber', 'registrationType', 'status', 'deceased', 'submittedBy',
                  'informantName', 'informantRelationship', 'informantAddress', 'informantContact',
                  'amountDue', 'orNumber', 'processingDueDate', 'verifiedAt', 'registeredAt',
                  'pickupStatus', 'remarks', 'notes', 'createdAt', 'updatedAt']
        read_only_fields = fields

    def get_submittedBy(self, obj):
        if obj.submitted_by is None:
            return None
        return {'id': obj.submitted_by.id, 'name': obj.submitted_by.full_name, 'email': obj.submitted_by.email}


class DeathRegistrationDetailSerializer(DeathRegistrationSerializer):
    documents = RegistrationDocumentSerializer(many=True, read_only=True)

    class Meta(DeathRegistrationSerializer.Meta):
        fields = DeathRegistrationSerializer.Meta.fields + ['documents']
        read_only_fields = fields


class DeathRegistrationCreateSerializer(serializers.Serializer):
    registrationType = serializers.ChoiceField(choices=DeathRegistration.TYPE_CHOICES)
    deceased = DeceasedRecordSerializer()
    informantName = serializers.CharField(max_length=200)
    informantRelationship = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    informantAddress = serializers.CharField(required=False, allow_blank=True, default='')
    informantContact = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    remarks = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        if hasattr(data, 'get') and isinstance(data.get('registrationType'), str):
            data = {**data, 'registrationType': data['registrationType'].upper()}
        return super().to_internal_value(data)
