"""Daily grant job with APScheduler.

Each run searches the enabled sources for the configured daily terms,
scores the collected opportunities against saved profiles and emails the
daily digests. Without Supabase credentials the run stays in preview mode:
matches are computed and logged but nothing is persisted or sent.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .adapters import build_adapters
from .aggregator import search_sources
from .config import Config, load_config
from .database import SupabaseClient
from .deduplicator import Deduplicator
from .matching import run_matching
from .models.opportunity import NormalizedOpportunity
from .models.profile import NotificationFrequency
from .notifier import EmailSender, dispatch_notifications
from .scorer.taxonomy import load_taxonomy, use_taxonomy

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


async def fetch_daily_opportunities(config: Config) -> List[NormalizedOpportunity]:
    """Search every enabled source once per daily term, deduplicated."""
    adapters = build_adapters(config)
    collected: List[NormalizedOpportunity] = []
    for term in config.search_terms:
        try:
            results = await search_sources(adapters, term)
        except Exception as e:
            logger.error("Search for %r failed: %s", term, e)
            continue
        for source, result in results.results.items():
            if result.error:
                logger.warning("⚠ %s (%s): %s", source.value, term, result.error)
            collected.extend(result.opportunities)
    return Deduplicator().deduplicate(collected)


async def run_daily_job(config: Optional[Config] = None) -> Dict[str, Any]:
    """Fetch, match and notify. Returns a per-step summary."""
    config = config or load_config()
    summary: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "steps": [],
        "errors": [],
    }

    logger.info("=" * 60)
    logger.info("Starting daily grant job")
    logger.info("=" * 60)
    start_time = datetime.now(timezone.utc)

    try:
        with use_taxonomy(load_taxonomy(config.taxonomy_file)):
            # Step 1: fetch
            opportunities = await fetch_daily_opportunities(config)
            summary["steps"].append({"step": "fetch_grants", "success": True, "count": len(opportunities)})
            logger.info("Total unique opportunities fetched: %d", len(opportunities))

            # Step 2: match
            store = SupabaseClient(config.supabase_url, config.supabase_key) if config.has_persistence else None
            match_summary = run_matching(opportunities, store=store, threshold=config.match_threshold)
            summary["steps"].append({
                "step": "match_grants",
                "success": not match_summary.errors,
                "profiles_processed": match_summary.profiles_processed,
                "total_matches": match_summary.total_matches,
                "preview": match_summary.preview,
            })
            summary["errors"].extend(match_summary.errors)

            # Step 3: notify
            sender = EmailSender(api_key=config.resend_api_key, from_email=config.from_email)
            notify_summary = dispatch_notifications(
                store,
                sender,
                frequency=NotificationFrequency.DAILY,
                base_url=config.base_url,
            )
            summary["steps"].append({
                "step": "send_notifications",
                "success": not notify_summary.errors,
                "emails_sent": notify_summary.emails_sent,
                "message": notify_summary.message,
            })
            summary["errors"].extend(notify_summary.errors)
        summary["success"] = True

    except Exception as e:
        logger.error("Daily job failed: %s", e, exc_info=True)
        summary["errors"].append(str(e))
        summary["success"] = False

    duration = (datetime.now(timezone.utc) - start_time).total_seconds()
    logger.info("=" * 60)
    logger.info("Daily job completed in %.2f seconds (errors=%d)", duration, len(summary["errors"]))
    logger.info("=" * 60)
    return summary


async def start_scheduler(config: Config) -> None:
    """Run the daily job every day at DAILY_RUN_HOUR (UTC) until interrupted."""
    logger.info("Initializing Grant Search daily job")
    logger.info("Daily run hour: %02d:00 UTC", config.daily_run_hour)

    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        run_daily_job,
        trigger=CronTrigger(hour=config.daily_run_hour, minute=0, timezone="UTC"),
        args=[config],
        id="daily_grants",
        name="Fetch, match and notify daily grants",
        replace_existing=True,
        max_instances=1,  # Prevent overlapping runs
    )
    scheduler.start()
    logger.info("✓ Scheduler started")

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down scheduler...")
        scheduler.shutdown()
        logger.info("✓ Scheduler stopped")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Grant search daily job")
    parser.add_argument("--once", action="store_true", help="Run one cycle and exit")
    args = parser.parse_args(argv)

    config = load_config()
    logging.getLogger().setLevel(config.log_level)

    if args.once:
        asyncio.run(run_daily_job(config))
        return
    try:
        asyncio.run(start_scheduler(config))
    except (KeyboardInterrupt, SystemExit):
        pass


if __name__ == "__main__":
    main()
