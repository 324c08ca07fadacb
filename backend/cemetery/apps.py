from django.apps import AppConfig


class CemeteryConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.cemetery'
