import json

from rest_framework import serializers
from rest_framework.utils import html
from backend.inventory.models import Supplier
from .models import PurchaseOrder, DeliveryReceipt, DeliveryItem


class PurchaseOrderSerializer(serializers.ModelSerializer):
    poNumber = serializers.CharField(source='po_number', read_only=True)
    poDate = serializers.DateField(source='po_date', read_only=True)
    totalAmount = serializers.DecimalField(source='total_amount', max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = ['id', 'poNumber', 'poDate', 'totalAmount', 'remarks']


class DeliveryItemSerializer(serializers.ModelSerializer):
    itemId = serializers.IntegerField(source='item_id', read_only=True)
    itemCode = serializers.CharField(source='item.item_code', read_only=True)
    itemName = serializers.CharField(source='item.item_name', read_only=True)
    unitOfMeasure = serializers.CharField(source='item.unit_of_measure', read_only=True)
    quantityOrdered = serializers.IntegerField(source='quantity_ordered', read_only=True)
    quantityDelivered = serializers.IntegerField(source='quantity_delivered', read_only=True)
    quantityAccepted = serializers.IntegerField(source='quantity_accepted', read_only=True)
    quantityRejected = serializers.IntegerField(source='quantity_rejected', read_only=True)
    unitCost = serializers.DecimalField(source='unit_cost', max_digits=12, decimal_places=2, read_only=True)
    totalAmount = serializers.SerializerMethodField()

    class Meta:
        model = DeliveryItem
        fields = ['id', 'itemId', 'itemCode', 'itemName', 'unitOfMeasure', 'quantityOrdered', 'quantityDelivered',
                  'quantityAccepted', 'quantityRejected', 'unitCost', 'totalAmount', 'remarks']

    def get_totalAmount(self, obj):
        return str(obj.quantity_delivered * obj.unit_cost)


class DeliveryReceiptSerializer(serializers.ModelSerializer):
    drNumber = serializers.CharField(source='dr_number', read_only=True)
    poNumber = serializers.CharField(source='purchase_order.po_number', read_only=True, default=None)
    purchaseOrder = PurchaseOrderSerializer(source='purchase_order', read_only=True)
    supplier = serializers.SerializerMethodField()
    deliveryDate = serializers.DateField(source='delivery_date', read_only=True)
    receivedBy = serializers.CharField(source='received_by', read_only=True)
    verifiedBy = serializers.SerializerMethodField()
    verifiedAt = serializers.DateTimeField(source='verified_at', read_only=True)
    drFileUrl = serializers.SerializerMethodField()
    items = DeliveryItemSerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = DeliveryReceipt
        fields = ['id', 'drNumber', 'poNumber', 'purchaseOrder', 'supplier', 'deliveryDate', 'receivedBy', 'status',
                  'verifiedBy', 'verifiedAt', 'drFileUrl', 'remarks', 'items', 'createdAt']

    def get_supplier(self, obj):
        return {'id': obj.supplier_id, 'name': obj.supplier.name}

    def get_verifiedBy(self, obj):
        return obj.verified_by.email if obj.verified_by else None

    def get_drFileUrl(self, obj):
        return obj.dr_document.url if obj.dr_document else None


class DeliveryLineInputSerializer(serializers.Serializer):
    itemCode = serializers.CharField(source='item_code', max_length=50)
    itemName = serializers.CharField(source='item_name', max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    category = serializers.CharField(required=False, allow_blank=True, default='')
    unitOfMeasure = serializers.CharField(source='unit_of_measure', max_length=30)
    quantityOrdered = serializers.IntegerField(source='quantity_ordered', min_value=0)
    quantityDelivered = serializers.IntegerField(source='quantity_delivered', min_value=0)
    quantityAccepted = serializers.IntegerField(source='quantity_accepted', min_value=0, required=False, allow_null=True)
    quantityRejected = serializers.IntegerField(source='quantity_rejected', min_value=0, required=False, default=0)
    unitCost = serializers.DecimalField(source='unit_cost', max_digits=12, decimal_places=2, min_value=0,
                                        required=False, allow_null=True)
    remarks = serializers.CharField(required=False, allow_blank=True, default='')


class JSONListField(serializers.ListField):
    """List field that also accepts a JSON-encoded string (multipart uploads)"""

    def get_value(self, dictionary):
        if html.is_html_input(dictionary):
            values = dictionary.getlist(self.field_name, [])
            if len(values) == 1 and isinstance(values[0], str):
                return values[0]
        return super().get_value(dictionary)

    def to_internal_value(self, data):
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                self.fail('not_a_list', input_type='str')
        return super().to_internal_value(data)


class DeliveryCreateSerializer(serializers.Serializer):
    supplierId = serializers.PrimaryKeyRelatedField(source='supplier', queryset=Supplier.objects.all())
    poNumber = serializers.CharField(source='po_number', max_length=100)
    drNumber = serializers.CharField(source='dr_number', max_length=100)
    deliveryDate = serializers.DateField(source='delivery_date')
    receivedBy = serializers.CharField(source='received_by', max_length=200)
    remarks = serializers.CharField(required=False, allow_blank=True, default='')
    drFile = serializers.FileField(source='dr_document', required=False, allow_null=True)
    items = JSONListField(child=DeliveryLineInputSerializer(), allow_empty=False)


class DeliveryStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DeliveryReceipt.STATUS_CHOICES)
    remarks = serializers.CharField(required=False, allow_blank=True)
