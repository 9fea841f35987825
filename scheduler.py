from apscheduler.schedulers.background import BackgroundScheduler
from flask import current_app

from extensions import db
from models import Payment
from utils.notify import notify_parents, payment_reminder_message
from utils.penalties import describe_payment
from utils.timezone_helpers import app_timezone


def due_soon_reminders(app):
    """Remind parents about payments due soon and warn about overdue ones."""
    with app.app_context():
        window = int(current_app.config.get('DUE_SOON_DAYS', 3))
        payments = db.session.execute(db.select(Payment).filter(Payment.status != 'paid')).scalars().all()
        reminded = warned = 0
        for payment in payments:
            if not payment.student_id:
                continue
            details = describe_payment(payment.to_dict(), window_days=window)
            if not (details['isDueSoon'] or details['isOverdue']):
                continue
            text = payment_reminder_message(details.get('studentName') or 'your child', details)
            try:
                notify_parents(payment.admin_id, payment.student_id, text, button_text='Open parent portal')
            except Exception:
                current_app.logger.exception("Reminder for payment %s failed", payment.id)
                continue
            if details['isOverdue']:
                warned += 1
            else:
                reminded += 1
        current_app.logger.info("Payment reminders: %s due soon, %s overdue", reminded, warned)
        return {'dueSoon': reminded, 'overdue': warned}


def _scheduler_timezone(app):
    with app.app_context():
        return app_timezone()


def start_scheduler(app):
    scheduler = BackgroundScheduler(timezone=_scheduler_timezone(app))
    scheduler.add_job(
        due_soon_reminders,
        'cron',
        args=[app],
        hour=int(app.config.get('REMINDER_HOUR', 9)),
        minute=0,
        id='due_soon_reminders',
        replace_existing=True,
    )
    scheduler.start()
    app.logger.info("Scheduler started: due_soon_reminders daily at %02d:00", int(app.config.get('REMINDER_HOUR', 9)))
    return scheduler
