from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'pos_backend.catalog'
    label = 'catalog'
    verbose_name = 'Catalog'
