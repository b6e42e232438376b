import pytest

from conftest import FakeVisionClient, annotation
from lostfound.integrations.vision.client import ImageAnnotation
from lostfound.modules.matching.visual import AnnotationCache, VisualScorer, visual_similarity


class TestVisualSimilarity:

    def test_identical_annotations(self):
        a = annotation(entities=["Backpack"], labels=["Bag", "Blue"], colors=[(10, 20, 200)])
        assert visual_similarity(a, a) == pytest.approx(1.0)

    def test_case_insensitive_overlap(self):
        a = annotation(entities=["Backpack", "Jansport"])
        b = annotation(entities=["backpack", "Luggage"])
        assert visual_similarity(a, b) == pytest.approx(1 / 3)

    def test_only_present_signals_are_weighted(self):
        a = annotation(labels=["bag"], colors=[(0, 0, 0)])
        b = annotation(labels=["bag", "strap"], colors=[(0, 0, 0)])
        expected = (0.4 * 0.5 + 0.2 * 1.0) / 0.6
        assert visual_similarity(a, b) == pytest.approx(expected)

    def test_best_of_top_three_colors(self):
        a = annotation(colors=[(255, 0, 0), (0, 255, 0), (0, 0, 255), (9, 9, 9)])
        b = annotation(colors=[(255, 255, 255), (0, 0, 255)])
        assert visual_similarity(a, b) == pytest.approx(1.0)

    def test_fourth_color_ignored(self):
        a = annotation(colors=[(255, 0, 0), (255, 0, 0), (255, 0, 0), (0, 0, 0)])
        b = annotation(colors=[(0, 0, 0)])
        assert visual_similarity(a, b) < 1.0

    def test_no_signal(self):
        assert visual_similarity(ImageAnnotation(), annotation(labels=["bag"])) == 0.0


class TestAnnotationCache:

    def test_expiry(self):
        now = [100.0]
        cache = AnnotationCache(ttl=10, clock=lambda: now[0])
        ann = annotation(labels=["bag"])
        cache.set("u", ann)
        assert cache.get("u") is ann
        now[0] = 110.0
        assert cache.get("u") is None
        assert len(cache) == 0

    def test_expired_entries_swept_on_write(self):
        now = [100.0]
        cache = AnnotationCache(ttl=10, clock=lambda: now[0])
        cache.set("u1", annotation(labels=["bag"]))
        now[0] = 111.0
        cache.set("u2", annotation(labels=["shoe"]))
        assert len(cache) == 1
        assert cache.get("u2") is not None

    def test_oldest_dropped_at_capacity(self):
        cache = AnnotationCache(ttl=60, max_entries=2)
        for url in ("u1", "u2", "u3"):
            cache.set(url, annotation(labels=[url]))
        assert len(cache) == 2
        assert cache.get("u1") is None
        assert cache.get("u3") is not None

    def test_rewrite_refreshes_position(self):
        cache = AnnotationCache(ttl=60, max_entries=2)
        cache.set("u1", annotation(labels=["a"]))
        cache.set("u2", annotation(labels=["b"]))
        cache.set("u1", annotation(labels=["c"]))
        cache.set("u3", annotation(labels=["d"]))
        assert cache.get("u2") is None
        assert cache.get("u1").labels[0].description == "c"

    def test_disabled(self):
        cache = AnnotationCache(ttl=0)
        cache.set("u", annotation(labels=["bag"]))
        assert cache.get("u") is None


class TestVisualScorer:

    def test_failure_returns_none(self):
        scorer = VisualScorer(FakeVisionClient(fail_suffixes=["bad.jpg"]))
        assert scorer.annotate("https://x/bad.jpg") is None

    def test_cache_avoids_second_call(self):
        client = FakeVisionClient({"a.jpg": annotation(labels=["bag"])})
        scorer = VisualScorer(client, cache=AnnotationCache(ttl=60))
        scorer.annotate("https://x/a.jpg")
        scorer.annotate("https://x/a.jpg")
        assert len(client.calls) == 1

    def test_failures_are_not_cached(self):
        client = FakeVisionClient(fail_suffixes=["a.jpg"])
        scorer = VisualScorer(client, cache=AnnotationCache(ttl=60))
        scorer.annotate("https://x/a.jpg")
        scorer.annotate("https://x/a.jpg")
        assert len(client.calls) == 2

    @pytest.mark.parametrize("workers", [1, 4])
    def test_score_many_keeps_input_order(self, workers):
        lost = annotation(labels=["bag"])
        client = FakeVisionClient(
            {"1.jpg": annotation(labels=["bag"]), "2.jpg": annotation(labels=["shoe"])},
            fail_suffixes=["3.jpg"],
        )
        scorer = VisualScorer(client, max_workers=workers)
        urls = ["https://x/1.jpg", "https://x/2.jpg", "https://x/3.jpg"]
        assert scorer.score_many(lost, urls) == [1.0, 0.0, None]
