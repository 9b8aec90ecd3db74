from django.apps import AppConfig


class ProspectingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'ori.prospecting'
    verbose_name = 'Prospecting'
