import logging

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from orders.models import Order
from orders.status import OrderStatus
from payments.models import Payment

from . import events
from .hub import hub
from .whatsapp import send_ready_notice

logger = logging.getLogger(__name__)


def publish_on_commit(build):
    """Publish once the surrounding transaction commits; ``build`` makes the event."""

    def publish():
        try:
            hub.publish(build())
        except Exception:
            logger.exception("Failed to publish event")

    transaction.on_commit(publish)


@receiver(post_save, sender=Order)
def order_saved(sender, instance, created, **kwargs):

    if created:
        # Items are written after the order row, so build the event at commit
        publish_on_commit(lambda: events.order_created(instance))
        return

    previous_status = instance.previous_value("status")
    if previous_status is not None and previous_status != instance.status:
        event = events.order_status_changed(instance, previous_status)
        publish_on_commit(lambda: event)

        if instance.status == OrderStatus.READY:
            transaction.on_commit(lambda: send_ready_notice(instance))

    was_verified = instance.previous_value("payment_verified")
    if was_verified is not None and not was_verified and instance.payment_verified:
        event_verified = events.order_payment_verified(instance)
        publish_on_commit(lambda: event_verified)


@receiver(post_save, sender=Payment)
def payment_saved(sender, instance, created, **kwargs):

    if created:
        if instance.method == "upi" and instance.status == "pending":
            event = events.payment_submitted(instance)
            publish_on_commit(lambda: event)
        return

    previous_status = instance.previous_value("status")
    if previous_status == "pending" and instance.status != "pending":
        event = events.payment_resolved(instance)
        publish_on_commit(lambda: event)
