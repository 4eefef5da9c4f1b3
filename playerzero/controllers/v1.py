from fastapi import APIRouter

from . import access, admin, flags, leaderboard, profiles, stats

router = APIRouter(prefix="/v1")
router.include_router(access.router)
router.include_router(profiles.router)
router.include_router(stats.router)
router.include_router(leaderboard.router)
# admin writes are HMAC signed, see flags.update_free_mode
router.include_router(flags.router)
router.include_router(admin.router)
