"""
Emergency signals - publish post/participation changes and notify posters
of new responses.
"""
from apps.core import realtime
from apps.core.observability import log_domain_event

from .models import EmergencyPost, Participation

realtime.track_model(EmergencyPost)
realtime.track_model(Participation)


def notify_poster_of_participation(change):
    """
    Tell the poster a volunteer responded to one of their posts.

    Delivery to the poster's client happens through their own
    subscriptions; this records the notification.
    """
    posted_by_id = (
        EmergencyPost.objects.filter(pk=change.record['emergency_id'])
        .values_list('posted_by_id', flat=True)
        .first()
    )
    if posted_by_id is None:
        return

    log_domain_event(
        'poster_notified_of_participation',
        entity_type='Participation',
        entity_id=str(change.record['id']),
        entity_ids={
            'emergency_post_id': str(change.record['emergency_id']),
            'posted_by_id': str(posted_by_id),
        },
    )


poster_notifications = realtime.manager.subscribe(
    Participation._meta.db_table,
    notify_poster_of_participation,
    events={realtime.INSERT},
)
