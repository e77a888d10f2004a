"""Registry of loaded regions (maps) known to the exporter.

The host calls the load/discard hooks on its own thread; background cycles
read ``known()`` without locking. ``known()`` hands out a tuple copy so a
cycle iterates a stable sequence even if a region is discarded meanwhile; the
regions themselves may still be torn down underneath it, which the snapshot
builder tolerates per region.
"""

import logging
from typing import Dict, Optional, Tuple

from core.interfaces import HostRegion

logger = logging.getLogger(__name__)


class RegionRegistry:
    """Loaded regions keyed by stable id, in registration order."""

    def __init__(self) -> None:
        self._regions: Dict[int, HostRegion] = {}

    def register(self, region: HostRegion) -> None:
        """Add a freshly loaded region, replacing any entry with the same id."""
        region_id = region.region_id
        if region_id in self._regions:
            logger.debug("Region %s re-registered, replacing previous entry", region_id)
            # Re-loading puts the region at the end, like a fresh load
            del self._regions[region_id]
        self._regions[region_id] = region
        logger.debug("Region %s registered (%d known)", region_id, len(self._regions))

    def discard(self, region: HostRegion) -> bool:
        """Remove an unloaded region.

        The region is matched by identity first so that a stale handle cannot
        evict a newer region that reused its id.

        Returns:
            True if the region was known and removed
        """
        for region_id, known in self._regions.items():
            if known is region:
                del self._regions[region_id]
                logger.debug("Region %s discarded", region_id)
                return True
        return False

    def get(self, region_id: int) -> Optional[HostRegion]:
        return self._regions.get(region_id)

    def clear(self) -> None:
        self._regions = {}

    def known(self) -> Tuple[HostRegion, ...]:
        """Known regions in registration order."""
        return tuple(self._regions.values())

    def __len__(self) -> int:
        return len(self._regions)

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._regions
