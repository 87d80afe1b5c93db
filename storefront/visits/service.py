"""
Notification de visite (webhook Discord), best-effort.
- Construit un embed: page, pays (cf-ipcountry), horodatage, referrer ("Direct" à défaut),
  user agent tronqué à 100 caractères.
- Aucune erreur ne remonte au visiteur: le résultat dit seulement si l'envoi a eu lieu.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

import httpx

from storefront import config
from storefront.utils.best_effort import BestEffort, run_best_effort

logger = logging.getLogger(__name__)

USER_AGENT_MAX = 100
EMBED_COLOR = 0xF5F0E8


def build_embed(page: str, country: str, referrer: str, user_agent: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    timestamp = now.isoformat()
    page = page or "/"
    return {
        "thread_name": f"Visit: {page} - {now.date().isoformat()}",
        "embeds": [
            {
                "title": "New Website Visit",
                "color": EMBED_COLOR,
                "fields": [
                    {"name": "Page", "value": page, "inline": True},
                    {"name": "Country", "value": country or "Unknown", "inline": True},
                    {"name": "Time", "value": timestamp, "inline": True},
                    {"name": "Referrer", "value": referrer or "Direct", "inline": False},
                    {"name": "User Agent", "value": (user_agent or "")[:USER_AGENT_MAX] or "Unknown", "inline": False},
                ],
                "footer": {"text": config.VISIT_FOOTER_TEXT},
                "timestamp": timestamp,
            }
        ],
    }

def _post_webhook(payload: Dict[str, Any], transport: Optional[httpx.BaseTransport] = None) -> int:
    if not config.DISCORD_WEBHOOK_URL:
        raise RuntimeError("DISCORD_WEBHOOK_URL not configured")
    with httpx.Client(timeout=config.PROVIDER_TIMEOUT_SECONDS, transport=transport) as client:
        response = client.post(config.DISCORD_WEBHOOK_URL, json=payload)
    response.raise_for_status()
    return response.status_code

# module storefront.visits.service
def track_visit(
    page: str,
    referrer: str = "",
    user_agent: str = "",
    country: str = "",
    transport: Optional[httpx.BaseTransport] = None,
) -> BestEffort[int]:
    payload = build_embed(page, country, referrer, user_agent)
    result = run_best_effort("visits.track_visit", _post_webhook, payload, transport=transport, logger=logger)
    if result.ok:
        logger.info("visits.track_visit page=%s country=%s", page or "/", country or "Unknown")
    return result
