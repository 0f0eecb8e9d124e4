"""Django signals for cache invalidation."""

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from webinars.models import Webinar
from webinars.stores.django_store import catalog_cache_key


@receiver([post_save, post_delete], sender=Webinar)
def invalidate_catalog_cache(sender, instance, **kwargs):
    """Drop the cached catalog entry when a webinar is saved or deleted."""
    cache.delete(catalog_cache_key(instance.pk))
