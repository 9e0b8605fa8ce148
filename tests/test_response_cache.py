import threading
import unittest

from weathercli.data_sources.response_cache import ResponseCache


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestResponseCache(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = ResponseCache(ttl_seconds=300, clock=self.clock)

    def test_get_returns_payload_just_inside_window(self):
        self.cache.put("k", {"temp": 1})
        self.clock.advance(300 - 0.001)
        self.assertEqual(self.cache.get("k"), {"temp": 1})

    def test_get_evicts_entry_once_window_passes(self):
        self.cache.put("k", {"temp": 1})
        self.clock.advance(300 + 0.001)
        self.assertIsNone(self.cache.get("k"))
        self.assertNotIn("k", self.cache)
        self.assertEqual(len(self.cache), 0)

    def test_entry_at_exact_window_is_stale(self):
        self.cache.put("k", {"temp": 1})
        self.clock.advance(300)
        self.assertIsNone(self.cache.get("k"))

    def test_stale_entries_are_not_swept_proactively(self):
        self.cache.put("a", {"v": 1})
        self.cache.put("b", {"v": 2})
        self.clock.advance(301)
        self.assertIsNone(self.cache.get("a"))
        # "b" is only removed when it is read
        self.assertIn("b", self.cache)

    def test_miss_has_no_side_effect(self):
        self.cache.put("a", {"v": 1})
        self.assertIsNone(self.cache.get("missing"))
        self.assertEqual(len(self.cache), 1)

    def test_put_replaces_and_restamps(self):
        self.cache.put("k", {"v": 1})
        self.clock.advance(200)
        self.cache.put("k", {"v": 2})
        self.clock.advance(200)
        self.assertEqual(self.cache.get("k"), {"v": 2})

    def test_returned_payload_is_a_copy(self):
        self.cache.put("k", {"nested": {"v": 1}})
        first = self.cache.get("k")
        first["nested"]["v"] = 99
        self.assertEqual(self.cache.get("k"), {"nested": {"v": 1}})

    def test_caller_mutation_after_put_does_not_leak(self):
        payload = {"v": [1, 2]}
        self.cache.put("k", payload)
        payload["v"].append(3)
        self.assertEqual(self.cache.get("k"), {"v": [1, 2]})

    def test_empty_payload_is_cached(self):
        self.cache.put("k", {})
        self.assertEqual(self.cache.get("k"), {})

    def test_clear_drops_fresh_entries(self):
        self.cache.put("a", {"v": 1})
        self.cache.put("b", {"v": 2})
        self.cache.clear()
        self.assertIsNone(self.cache.get("a"))
        self.assertIsNone(self.cache.get("b"))
        self.assertEqual(len(self.cache), 0)

    def test_ttl_must_be_positive(self):
        with self.assertRaises(ValueError):
            ResponseCache(ttl_seconds=0)

    def test_concurrent_puts_and_gets(self):
        cache = ResponseCache(ttl_seconds=300)

        def worker(n):
            for i in range(200):
                cache.put(f"k{n}-{i % 10}", {"i": i})
                cache.get(f"k{n}-{(i + 5) % 10}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(cache), 40)


if __name__ == "__main__":
    unittest.main()
