import logging
import os
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from app.core.config import settings
from app.core.database import SessionLocal
from app.services.exam import exam_service

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def deactivate_past_exams():
    db = SessionLocal()
    try:
        exam_ids = exam_service.deactivate_past_exams(db)
        logger.info(f"Exam status job finished: {len(exam_ids)} exams deactivated")
    except Exception as e:
        logger.error(f"Error deactivating past exams: {e}", exc_info=True)
    finally:
        db.close()


def start_scheduler():
    if os.getenv("TESTING") == "true" or not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled")
        return

    if not scheduler.running:
        scheduler.add_job(
            deactivate_past_exams,
            'cron',
            hour=settings.EXAM_STATUS_JOB_HOUR,
            minute=0,
            id='deactivate_past_exams',
            name='Deactivate Exams Past Their Application Date',
            replace_existing=True
        )
        scheduler.start()
        logger.info("Scheduler started with daily exam status job")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
