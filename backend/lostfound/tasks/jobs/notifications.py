from lostfound.tasks.celery_app import celery_app


@celery_app.task
def notify_match_results(lost_item_id: int, match_count: int) -> dict:
    from lostfound import create_app
    from lostfound.modules.notifications.service import record_match_notification

    app = create_app()
    with app.app_context():
        n = record_match_notification(lost_item_id, match_count)
        return {"lostItemId": lost_item_id, "matchCount": match_count, "notificationId": n.id if n else None}
