from apscheduler.schedulers.background import BackgroundScheduler
import atexit
from app.extensions import db
from app.models import Bookings, Payments, UserSessions, utcnow
from app.services import settings_service
from app.services.email_service import email_service
from app.services.notification_service import already_notified, notify

scheduler = BackgroundScheduler()


def _stamp():
    return utcnow().strftime("%Y-%m-%d %H:%M:%S")


def complete_finished_bookings(app):
    """Confirmed bookings whose end_date has passed become completed."""
    with app.app_context():
        try:
            today = utcnow().date()
            finished = (
                db.session.query(Bookings)
                .filter(Bookings.status == "confirmed", Bookings.end_date < today)
                .all()
            )
            for booking in finished:
                booking.status = "completed"
            db.session.commit()
            print(f"[SCHEDULER] {_stamp()} - Auto-completed {len(finished)} booking(s)")
            return len(finished)

        except Exception as e:
            db.session.rollback()
            print(f"[SCHEDULER] {_stamp()} - Error auto-completing bookings: {e}")
            return 0


def notify_overdue_payments(app):
    """One payment notification per pending payment past its due date."""
    with app.app_context():
        try:
            today = utcnow().date()
            overdue = (
                db.session.query(Payments)
                .filter(Payments.payment_status == "pending", Payments.due_date < today)
                .all()
            )
            send_email = settings_service.get_setting(settings_service.GENERAL, "emailNotifications")

            created = 0
            for payment in overdue:
                if already_notified(payment.user_id, "payment", payment.id):
                    continue
                shop = payment.booking.shop if payment.booking else None
                notify(
                    payment.user_id,
                    "Payment overdue",
                    f"Payment #{payment.id} of {float(payment.amount):,.2f} "
                    f"was due on {payment.due_date.isoformat()}.",
                    type="payment",
                    related_id=payment.id,
                )
                created += 1

                if send_email and payment.user:
                    result = email_service.send_payment_reminder(
                        to_email=payment.user.email,
                        customer_name=payment.user.user_name,
                        shop_title=shop.title if shop else None,
                        amount=float(payment.amount),
                        due_date=payment.due_date.isoformat(),
                        payment_id=payment.id,
                    )
                    if not result.get("success"):
                        print(f"[SCHEDULER] Reminder email for payment {payment.id} not sent: {result.get('error')}")

            db.session.commit()
            print(f"[SCHEDULER] {_stamp()} - Created {created} overdue payment notification(s)")
            return created

        except Exception as e:
            db.session.rollback()
            print(f"[SCHEDULER] {_stamp()} - Error notifying overdue payments: {e}")
            return 0


def revoke_expired_sessions(app):
    with app.app_context():
        try:
            now = utcnow()
            expired = (
                db.session.query(UserSessions)
                .filter(UserSessions.revoked_at.is_(None), UserSessions.expires_at <= now)
                .all()
            )
            for session in expired:
                session.revoked_at = now
            db.session.commit()
            print(f"[SCHEDULER] {_stamp()} - Revoked {len(expired)} expired session(s)")
            return len(expired)

        except Exception as e:
            db.session.rollback()
            print(f"[SCHEDULER] {_stamp()} - Error revoking sessions: {e}")
            return 0


def init_scheduler(app):
    """Initialize the APScheduler scheduler with Flask app context."""
    scheduler.add_job(
        complete_finished_bookings, "interval", minutes=60, args=[app],
        id="complete_finished_bookings", replace_existing=True,
    )
    scheduler.add_job(
        notify_overdue_payments, "interval", minutes=60, args=[app],
        id="notify_overdue_payments", replace_existing=True,
    )
    scheduler.add_job(
        revoke_expired_sessions, "interval", minutes=30, args=[app],
        id="revoke_expired_sessions", replace_existing=True,
    )

    if not scheduler.running:
        scheduler.start()
        print("[SCHEDULER] Scheduler started")
        # Shut down the scheduler when exiting the app
        atexit.register(lambda: scheduler.shutdown(wait=False))
    else:
        print("[SCHEDULER] Scheduler already running (skipping duplicate start)")
