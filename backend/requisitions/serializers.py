from rest_framework import serializers
from backend.inventory.models import Item
from .models import RISRequest, RISItem, Issuance, IssuanceItem


class RISItemSerializer(serializers.ModelSerializer):
    itemId = serializers.IntegerField(source='item_id', read_only=True)
    itemCode = serializers.CharField(source='item.item_code', read_only=True)
    itemName = serializers.CharField(source='item.item_name', read_only=True)
    unitOfMeasure = serializers.CharField(source='item.unit_of_measure', read_only=True)
    quantityRequested = serializers.IntegerField(source='quantity_requested', read_only=True)
    quantityApproved = serializers.IntegerField(source='quantity_approved', read_only=True)

    class Meta:
        model = RISItem
        fields = ['id', 'itemId', 'itemCode', 'itemName', 'unitOfMeasure', 'quantityRequested', 'quantityApproved',
                  'justification', 'remarks']


class RISRequestSerializer(serializers.ModelSerializer):
    risNumber = serializers.CharField(source='ris_number', read_only=True)
    requestedBy = serializers.CharField(source='requested_by', read_only=True)
    dateNeeded = serializers.DateField(source='date_needed', read_only=True)
    approvedBy = serializers.CharField(source='approved_by', read_only=True)
    approvedAt = serializers.DateTimeField(source='approved_at', read_only=True)
    rejectedBy = serializers.CharField(source='rejected_by', read_only=True)
    rejectionReason = serializers.CharField(source='rejection_reason', read_only=True)
    issuedBy = serializers.CharField(source='issued_by', read_only=True)
    issuedAt = serializers.DateTimeField(source='issued_at', read_only=True)
    items = RISItemSerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = RISRequest
        fields = ['id', 'risNumber', 'department', 'requestedBy', 'email', 'purpose', 'dateNeeded', 'status',
                  'approvedBy', 'approvedAt', 'rejectedBy', 'rejectionReason', 'issuedBy', 'issuedAt', 'items',
                  'createdAt']


class RISLineInputSerializer(serializers.Serializer):
    itemId = serializers.PrimaryKeyRelatedField(source='item', queryset=Item.objects.all())
    quantityRequested = serializers.IntegerField(source='quantity_requested', min_value=1)
    justification = serializers.CharField(required=False, allow_blank=True, default='')
    remarks = serializers.CharField(required=False, allow_blank=True, default='')


class RISCreateSerializer(serializers.Serializer):
    department = serializers.CharField(max_length=200)
    requestedBy = serializers.CharField(source='requested_by', max_length=200)
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    purpose = serializers.CharField()
    dateNeeded = serializers.DateField(source='date_needed', required=False, allow_null=True)
    items = RISLineInputSerializer(many=True, allow_empty=False)


class IssuanceItemSerializer(serializers.ModelSerializer):
    itemId = serializers.IntegerField(source='item_id', read_only=True)
    itemCode = serializers.CharField(source='item.item_code', read_only=True)
    itemName = serializers.CharField(source='item.item_name', read_only=True)
    unitCost = serializers.DecimalField(source='unit_cost', max_digits=12, decimal_places=2, read_only=True)
    totalCost = serializers.DecimalField(source='total_cost', max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = IssuanceItem
        fields = ['id', 'itemId', 'itemCode', 'itemName', 'quantity', 'unitCost', 'totalCost']


class IssuanceSerializer(serializers.ModelSerializer):
    issuanceNumber = serializers.CharField(source='issuance_number', read_only=True)
    risId = serializers.IntegerField(source='ris_id', read_only=True)
    risNumber = serializers.CharField(source='ris.ris_number', read_only=True)
    issuedTo = serializers.CharField(source='issued_to', read_only=True)
    issuedBy = serializers.CharField(source='issued_by', read_only=True)
    issuedAt = serializers.DateTimeField(source='issued_at', read_only=True)
    acknowledgedBy = serializers.CharField(source='acknowledged_by', read_only=True)
    acknowledgedAt = serializers.DateTimeField(source='acknowledged_at', read_only=True)
    status = serializers.SerializerMethodField()
    items = IssuanceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Issuance
        fields = ['id', 'issuanceNumber', 'risId', 'risNumber', 'issuedTo', 'department', 'purpose', 'issuedBy',
                  'issuedAt', 'acknowledgedBy', 'acknowledgedAt', 'status', 'remarks', 'items']

    def get_status(self, obj):
        return 'ACKNOWLEDGED' if obj.is_acknowledged else 'ISSUED'
