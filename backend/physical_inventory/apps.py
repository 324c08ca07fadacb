from django.apps import AppConfig


class PhysicalInventoryConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.physical_inventory'
    verbose_name = 'Physical inventory'
