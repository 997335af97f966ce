"""
OTP Cleanup Service - purges expired verification codes
"""
import asyncio
import logging

from ..config import settings
from ..database import SessionLocal
from .otp_service import purge_expired

logger = logging.getLogger(__name__)


class OtpCleanupService:
    """Background service that deletes expired OTP rows"""

    def __init__(self, cleanup_interval: int = None):
        self.cleanup_interval = cleanup_interval or settings.OTP_CLEANUP_INTERVAL
        self.is_running = False
        self._task = None

    async def start(self):
        """Start the cleanup loop"""
        if self.is_running:
            logger.warning("OTP cleanup service already running")
            return

        self.is_running = True
        self._task = asyncio.create_task(self._cleanup_loop())
        logger.info(f"🧹 OTP Cleanup Service: Started (every {self.cleanup_interval}s)")

    async def stop(self):
        """Stop the cleanup loop"""
        self.is_running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("🧹 OTP Cleanup Service: Stopped")

    async def _cleanup_loop(self):
        while self.is_running:
            try:
                self.cleanup_now()
            except Exception as e:
                logger.error(f"Error in OTP cleanup loop: {e}", exc_info=True)
            await asyncio.sleep(self.cleanup_interval)

    def cleanup_now(self) -> int:
        """Purge expired OTPs immediately"""
        db = SessionLocal()
        try:
            purged = purge_expired(db)
            db.commit()
            if purged:
                logger.info(f"🧹 Purged {purged} expired OTPs")
            else:
                logger.debug("🧹 No expired OTPs to purge")
            return purged
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


# Global instance
otp_cleanup_service = OtpCleanupService()
