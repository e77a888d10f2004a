"""Actor portrait capture and the process-wide portrait cache.

Capturing needs the host's rendering context, so it is bound to the thread that
owns it (the simulation's update thread). ``PortraitCapture`` records that
thread when it is created and refuses to run anywhere else. Encoding to PNG
also happens here, on the owning thread; background cycles only ever see the
finished bytes.
"""

import hashlib
import io
import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple

import pygame

from core.config.export import PORTRAIT_CAMERA_OFFSET, PORTRAIT_SIZE, PORTRAIT_ZOOM
from core.exceptions import CaptureContextError, CaptureError
from core.snapshot_builder import TRANSIENT_READ_ERRORS

logger = logging.getLogger(__name__)


class PortraitSource(Protocol):
    """Host hook that renders an actor the way the colonist bar shows it."""

    def render_portrait(
        self,
        actor: Any,
        size: Tuple[int, int],
        camera_offset: Tuple[float, float, float],
        zoom: float,
    ) -> pygame.Surface:
        ...


class SpritePortraitSource:
    """Portrait source for hosts that keep a plain sprite per actor.

    Uses ``actor.portrait_image`` (a pygame Surface) when the actor has one,
    otherwise draws a flat badge whose colour is derived from the actor id.
    """

    def render_portrait(self, actor, size, camera_offset=PORTRAIT_CAMERA_OFFSET, zoom=PORTRAIT_ZOOM):
        surface = pygame.Surface(size, pygame.SRCALPHA)
        image: Optional[pygame.Surface] = getattr(actor, "portrait_image", None)
        if image is not None:
            surface.blit(pygame.transform.smoothscale(image, size), (0, 0))
            return surface

        digest = hashlib.md5(str(actor.actor_id).encode("utf-8")).digest()
        color = (digest[0], digest[1], digest[2], 255)
        center = (size[0] // 2, size[1] // 2)
        radius = max(1, int(min(size) / 2 / zoom))
        pygame.draw.circle(surface, color, center, radius)
        if getattr(actor, "dead", False):
            pygame.draw.line(surface, (0, 0, 0, 255), (0, 0), (size[0] - 1, size[1] - 1), 3)
        return surface


def encode_png(surface: pygame.Surface) -> bytes:
    """Losslessly encode *surface* as PNG bytes."""
    buffer = io.BytesIO()
    pygame.image.save(surface, buffer, "portrait.png")
    return buffer.getvalue()


class PortraitCache:
    """Encoded portraits keyed by actor id.

    Written only by the capture pass, which swaps in a freshly built map, so
    readers on other threads always see one whole pass or the previous one.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, bytes] = {}

    def replace(self, entries: Dict[str, bytes]) -> None:
        self._entries = entries

    def clear(self) -> None:
        self._entries = {}

    def view(self) -> Mapping[str, bytes]:
        """Read-only view of the current pass."""
        return MappingProxyType(self._entries)

    def get(self, actor_id: str) -> Optional[bytes]:
        return self._entries.get(actor_id)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, actor_id: object) -> bool:
        return actor_id in self._entries


class PortraitCapture:
    """Render actors into the portrait cache on the rendering thread."""

    def __init__(
        self,
        source: PortraitSource,
        cache: Optional[PortraitCache] = None,
        size: Tuple[int, int] = PORTRAIT_SIZE,
    ) -> None:
        self.source = source
        self.cache = cache if cache is not None else PortraitCache()
        self.size = size
        self._owner_thread = threading.get_ident()

    def bind_to_current_thread(self) -> None:
        """Make the calling thread the rendering thread."""
        self._owner_thread = threading.get_ident()

    def _require_render_thread(self) -> None:
        if threading.get_ident() != self._owner_thread:
            raise CaptureContextError(
                f"portrait capture must run on the rendering thread "
                f"(called from {threading.current_thread().name})"
            )

    def capture(self, actor: Any) -> bytes:
        """Render and encode one actor's portrait.

        Raises:
            CaptureContextError: If called off the rendering thread
            CaptureError: If the actor could not be rendered
        """
        self._require_render_thread()
        try:
            rendered = self.source.render_portrait(actor, self.size, PORTRAIT_CAMERA_OFFSET, PORTRAIT_ZOOM)
            # Copy out of the host's render target before encoding
            pixels = pygame.Surface(rendered.get_size(), pygame.SRCALPHA)
            pixels.blit(rendered, (0, 0))
            return encode_png(pixels)
        except (pygame.error, *TRANSIENT_READ_ERRORS) as e:
            raise CaptureError(f"could not capture portrait: {e}") from e

    def capture_all(self, actors: Iterable[Any]) -> int:
        """Rebuild the cache from scratch for *actors*.

        Actors that fail to capture are simply left out of the cache.

        Returns:
            Number of portraits captured
        """
        self._require_render_thread()
        fresh: Dict[str, bytes] = {}
        for actor in actors:
            if actor is None:
                continue
            try:
                actor_id = str(actor.actor_id)
                fresh[actor_id] = self.capture(actor)
            except CaptureError as e:
                logger.debug("Portrait skipped: %s", e)
            except TRANSIENT_READ_ERRORS as e:
                logger.debug("Portrait skipped, actor unavailable: %s", e)
        self.cache.replace(fresh)
        return len(fresh)
