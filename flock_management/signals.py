"""
Flock Management Signals

Automatic actions triggered by flock-related model events.
"""

import logging
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(post_save, sender='flock_management.MortalityRecord')
def decrement_farm_bird_counts(sender, instance, created, **kwargs):
    """
    Reduce the farm's stored male/female counts when mortality is recorded.

    Runs inside the caller's transaction when there is one; the farm row is
    locked so concurrent mortality entries cannot lose an update. Counts never
    drop below zero.
    """
    if not created:
        return

    from farms.models import Farm

    with transaction.atomic():
        farm = Farm.objects.select_for_update().get(pk=instance.farm_id)
        farm.apply_mortality(instance.male_mortality, instance.female_mortality)

    logger.info(
        f"Farm {farm.id} counts reduced by {instance.male_mortality} male / "
        f"{instance.female_mortality} female after mortality record {instance.id}"
    )
