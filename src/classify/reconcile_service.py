"""
Index Reconciliation
Re-applies tag associations for records whose indexing never completed and
prunes associations whose record no longer exists
"""

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from .content import ContentStorage
from .tags import TagStorage

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    scanned: int = 0
    repaired: int = 0
    repaired_ids: List[str] = field(default_factory=list)
    pruned: int = 0
    # (content_id, tag) associations removed because the record is gone
    pruned_entries: List[Tuple[str, str]] = field(default_factory=list)


class IndexReconciler:
    """Brings the tag index back in line with the content store"""

    def __init__(self, content_storage: ContentStorage, tag_storage: TagStorage):
        self.content_storage = content_storage
        self.tag_storage = tag_storage

    async def reconcile(self) -> ReconcileReport:
        """
        Add embedded tags missing from the index, then drop index members
        the content store no longer has.

        Idempotent: a second run over an unchanged store changes nothing.
        """
        report = ReconcileReport()
        await self._reindex(report)
        await self._prune(report)

        logger.info(
            f"Reconciliation complete: scanned {report.scanned}, repaired {report.repaired}, "
            f"pruned {report.pruned}"
        )
        return report

    async def _reindex(self, report: ReconcileReport) -> None:
        for content in await self.content_storage.list():
            report.scanned += 1
            content_id = str(content.id)
            indexed = set(await self.tag_storage.get_tags(content_id))
            missing = [tag for tag in content.tags if tag not in indexed]
            if not missing:
                continue

            await self.tag_storage.add_tags(content_id, content.tags)
            report.repaired += 1
            report.repaired_ids.append(content_id)
            logger.info(f"Re-indexed content {content_id}: added {missing}")

    async def _prune(self, report: ReconcileReport) -> None:
        # Left behind when retraction failed after the record was deleted
        for tag in await self.tag_storage.list_tags():
            for content_id in await self.tag_storage.find_by_tag(tag):
                if await self.content_storage.get(content_id) is not None:
                    continue

                await self.tag_storage.remove_tags(content_id, [tag])
                report.pruned += 1
                report.pruned_entries.append((content_id, tag))
                logger.info(f"Pruned missing content {content_id} from tag '{tag}'")
