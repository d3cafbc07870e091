import hashlib
import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

KB_LIST_VERSION_KEY = "support:kb:list-version"


def kb_list_timeout() -> int:
    return settings.SERVICEDESK.get("KB_LIST_CACHE_SECONDS", 60)


def kb_list_version() -> int:
    return cache.get_or_set(KB_LIST_VERSION_KEY, 1, timeout=None)


def kb_list_cache_key(request, audience: str) -> str:
    """Key for one rendered list page; drafts are only visible to the staff audience."""
    path = hashlib.md5(request.get_full_path().encode("utf-8")).hexdigest()
    return f"support:kb:list:{kb_list_version()}:{audience}:{path}"


def invalidate_kb_list():
    """Retire every cached list page by moving to a new key version."""
    try:
        cache.incr(KB_LIST_VERSION_KEY)
    except ValueError:
        # evicted or never set
        cache.set(KB_LIST_VERSION_KEY, 2, timeout=None)
    logger.debug("knowledge base list cache invalidated")
