from rest_framework import serializers
from .models import Supplier, Item, StockMovement
from .services import current_stock


class SupplierSerializer(serializers.ModelSerializer):
    contactPerson = serializers.CharField(source='contact_person', max_length=200)
    contactNumber = serializers.CharField(source='contact_number', max_length=30)
    tinNumber = serializers.CharField(source='tin_number', max_length=30, required=False, allow_blank=True)
    businessType = serializers.CharField(source='business_type', max_length=100, required=False, allow_blank=True)
    isActive = serializers.BooleanField(source='is_active', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Supplier
        fields = ['id', 'name', 'contactPerson', 'contactNumber', 'email', 'address', 'tinNumber',
                  'businessType', 'isActive', 'createdAt']


class ItemSerializer(serializers.ModelSerializer):
    itemCode = serializers.CharField(source='item_code', max_length=50)
    itemName = serializers.CharField(source='item_name', max_length=200)
    unitOfMeasure = serializers.CharField(source='unit_of_measure', max_length=30)
    unitCost = serializers.DecimalField(source='unit_cost', max_digits=12, decimal_places=2, required=False, min_value=0)
    reorderLevel = serializers.IntegerField(source='reorder_level', required=False, min_value=0)
    isActive = serializers.BooleanField(source='is_active', required=False)
    currentStock = serializers.SerializerMethodField()
    isLowStock = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Item
        fields = ['id', 'itemCode', 'itemName', 'description', 'category', 'unitOfMeasure', 'unitCost',
                  'reorderLevel', 'isActive', 'currentStock', 'isLowStock', 'createdAt', 'updatedAt']

    def _stock(self, obj):
        stock = getattr(obj, 'current_stock', None)
        return stock if stock is not None else current_stock(obj)

    def get_currentStock(self, obj):
        return self._stock(obj)

    def get_isLowStock(self, obj):
        return self._stock(obj) <= obj.reorder_level


class StockMovementSerializer(serializers.ModelSerializer):
    itemId = serializers.IntegerField(source='item_id', read_only=True)
    itemCode = serializers.CharField(source='item.item_code', read_only=True)
    itemName = serializers.CharField(source='item.item_name', read_only=True)
    movementType = serializers.CharField(source='movement_type', read_only=True)
    balanceBefore = serializers.IntegerField(source='balance_before', read_only=True)
    balanceAfter = serializers.IntegerField(source='balance_after', read_only=True)
    unitCost = serializers.DecimalField(source='unit_cost', max_digits=12, decimal_places=2, read_only=True)
    referenceType = serializers.CharField(source='reference_type', read_only=True)
    referenceId = serializers.CharField(source='reference_id', read_only=True)
    performedBy = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = StockMovement
        fields = ['id', 'itemId', 'itemCode', 'itemName', 'movementType', 'quantity', 'balanceBefore',
                  'balanceAfter', 'unitCost', 'referenceType', 'referenceId', 'remarks', 'performedBy', 'createdAt']
        read_only_fields = fields

    def get_performedBy(self, obj):
        return obj.performed_by.email if obj.performed_by else None
