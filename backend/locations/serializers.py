from rest_framework import serializers
from backend.inventory.models import Item
from .models import StorageZone, StorageRack, StockLocation


class StorageZoneSerializer(serializers.ModelSerializer):
    zoneName = serializers.CharField(source='zone_name', max_length=100)
    isActive = serializers.BooleanField(source='is_active', required=False)
    rackCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = StorageZone
        fields = ['id', 'zoneName', 'description', 'capacity', 'isActive', 'rackCount', 'createdAt']

    def get_rackCount(self, obj):
        count = getattr(obj, 'rack_count', None)
        return count if count is not None else obj.racks.count()


class StorageRackSerializer(serializers.ModelSerializer):
    rackCode = serializers.CharField(source='rack_code', max_length=50)
    zoneId = serializers.PrimaryKeyRelatedField(source='zone', queryset=StorageZone.objects.all())
    zoneName = serializers.CharField(source='zone.zone_name', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = StorageRack
        fields = ['id', 'rackCode', 'zoneId', 'zoneName', 'level', 'position', 'capacity', 'createdAt']


class StockLocationSerializer(serializers.ModelSerializer):
    tagCode = serializers.CharField(source='tag_code', max_length=50, required=False, allow_null=True, allow_blank=True)
    rackId = serializers.PrimaryKeyRelatedField(source='rack', queryset=StorageRack.objects.all())
    rackCode = serializers.CharField(source='rack.rack_code', read_only=True)
    itemId = serializers.PrimaryKeyRelatedField(source='item', queryset=Item.objects.all())
    itemCode = serializers.CharField(source='item.item_code', read_only=True)
    itemName = serializers.CharField(source='item.item_name', read_only=True)
    batchNumber = serializers.CharField(source='batch_number', max_length=100, required=False, allow_blank=True)
    expiryDate = serializers.DateField(source='expiry_date', required=False, allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = StockLocation
        fields = ['id', 'tagCode', 'rackId', 'rackCode', 'itemId', 'itemCode', 'itemName', 'quantity',
                  'batchNumber', 'expiryDate', 'status', 'createdAt']

    def validate_tagCode(self, value):
        # Blank tags are stored as NULL so several untagged locations can coexist
        return value or None
