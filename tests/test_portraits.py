"""Portrait capture tests (run headless through the dummy SDL driver)."""

import threading

import pygame
import pytest

from core.exceptions import CaptureContextError, CaptureError
from rendering.portraits import PortraitCache, PortraitCapture, SpritePortraitSource, encode_png
from tests.fakes.fake_host import VanishedActor

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class ExplodingSource:
    """Portrait source whose renderer fails for one actor."""

    def __init__(self, bad_id: str) -> None:
        self.bad_id = bad_id
        self.inner = SpritePortraitSource()

    def render_portrait(self, actor, size, camera_offset, zoom):
        if actor.actor_id == self.bad_id:
            raise pygame.error("render target lost")
        return self.inner.render_portrait(actor, size, camera_offset, zoom)


def test_encode_png_produces_png_bytes() -> None:
    surface = pygame.Surface((4, 4), pygame.SRCALPHA)
    surface.fill((10, 20, 30, 255))

    data = encode_png(surface)

    assert data.startswith(PNG_SIGNATURE)


def test_capture_all_fills_cache_with_png_per_actor(colony) -> None:
    capture = PortraitCapture(SpritePortraitSource())

    count = capture.capture_all(colony.colonists)

    assert count == len(colony.colonists)
    for actor in colony.colonists:
        assert capture.cache.get(actor.actor_id).startswith(PNG_SIGNATURE)


def test_sprite_source_uses_actor_image_when_present(colony) -> None:
    actor = colony.colonists[0]
    image = pygame.Surface((10, 10), pygame.SRCALPHA)
    image.fill((255, 0, 0))
    actor.portrait_image = image

    rendered = SpritePortraitSource().render_portrait(actor, (75, 75))

    assert rendered.get_size() == (75, 75)
    assert tuple(rendered.get_at((37, 37)))[:3] == (255, 0, 0)


def test_failing_actor_is_left_out(colony) -> None:
    bad_id = colony.colonists[1].actor_id
    capture = PortraitCapture(ExplodingSource(bad_id))

    count = capture.capture_all(colony.colonists + [VanishedActor(), None])

    assert count == len(colony.colonists) - 1
    assert bad_id not in capture.cache


def test_single_capture_failure_raises_capture_error(colony) -> None:
    bad = colony.colonists[0]
    capture = PortraitCapture(ExplodingSource(bad.actor_id))

    with pytest.raises(CaptureError):
        capture.capture(bad)


def test_each_pass_replaces_the_previous_one(colony) -> None:
    capture = PortraitCapture(SpritePortraitSource())
    capture.capture_all(colony.colonists)
    view_before = capture.cache.view()

    capture.capture_all(colony.colonists[:1])

    assert len(capture.cache) == 1
    # A reader holding the old view still sees the whole previous pass
    assert len(view_before) == len(colony.colonists)


def test_capture_off_the_rendering_thread_is_refused(colony) -> None:
    capture = PortraitCapture(SpritePortraitSource())
    errors = []

    def worker():
        try:
            capture.capture(colony.colonists[0])
        except CaptureContextError as e:
            errors.append(e)

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join(timeout=5)

    assert len(errors) == 1
    assert len(capture.cache) == 0


def test_bind_to_current_thread_moves_ownership(colony) -> None:
    capture = PortraitCapture(SpritePortraitSource())
    results = []

    def worker():
        capture.bind_to_current_thread()
        results.append(capture.capture_all(colony.colonists))

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join(timeout=5)

    assert results == [len(colony.colonists)]
    with pytest.raises(CaptureContextError):
        capture.capture_all(colony.colonists)


def test_cache_view_is_read_only() -> None:
    cache = PortraitCache()
    cache.replace({"Human1": b"png"})

    view = cache.view()

    with pytest.raises(TypeError):
        view["Human2"] = b"other"
    assert cache.get("Human1") == b"png"
