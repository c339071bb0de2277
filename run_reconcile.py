"""
Run one tag index reconciliation pass
Re-indexes records that were persisted but never made it into the tag index
"""
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from classify.api import build_services, close_services
from classify.config import load_config
from classify.errors import ClassifyError

# Load .env from project root
load_dotenv(Path(__file__).parent / ".env")


async def main() -> int:
    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    services = await build_services(config)
    try:
        report = await services.reconciler.reconcile()
    except ClassifyError as e:
        print(f"Reconciliation failed: {e}")
        return 1
    finally:
        await close_services(services)

    print(f"Scanned: {report.scanned}")
    print(f"Repaired: {report.repaired}")
    for content_id in report.repaired_ids:
        print(f"  - {content_id}")
    print(f"Pruned: {report.pruned}")
    for content_id, tag in report.pruned_entries:
        print(f"  - {content_id} from '{tag}'")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
