import unittest

from fakes import PHOTOS, FakeProvider, sized

from blobboss.lister import (
    BlobLister,
    EntryCollector,
    ListingPlan,
    iter_pages,
    plan_listing,
    reconstruct_prefixes,
)
from blobboss.models import Blob, Prefix


def names(entries):
    return [entry.name for entry in entries]


class ListingPlanTests(unittest.TestCase):
    def test_plain_listing_uses_delimiter(self):
        plan = plan_listing("media", "photos/")
        self.assertEqual(plan.list_prefix, "photos/")
        self.assertIsNone(plan.pattern)
        self.assertEqual(plan.delimiter, "/")
        self.assertFalse(plan.reconstructs_prefixes)

    def test_recursive_listing_drops_delimiter(self):
        self.assertIsNone(plan_listing("media", "photos/", recursive=True).delimiter)

    def test_directory_pattern_reconstructs_one_level_up(self):
        plan = plan_listing("media", "photos/*/")
        self.assertIsNone(plan.delimiter)
        self.assertEqual(plan.depth, 1)
        self.assertTrue(plan.reconstructs_prefixes)

    def test_recursive_wildcard_never_reconstructs(self):
        plan = plan_listing("media", "photos/**/*.jpg")
        self.assertIsNone(plan.delimiter)
        self.assertIsNone(plan.depth)
        self.assertFalse(plan.reconstructs_prefixes)

    def test_explicit_recursion_filters_instead_of_reconstructing(self):
        plan = plan_listing("media", "photos/*/*.jpg", recursive=True)
        self.assertFalse(plan.reconstructs_prefixes)


class IterPagesTests(unittest.TestCase):
    def test_continuation_tokens_followed_in_order(self):
        provider = FakeProvider({"c": sized({f"f{i}": 1 for i in range(5)})}, page_size=2)
        pages = list(iter_pages(provider, "c", None, "/"))
        self.assertEqual([len(p.items) for p in pages], [2, 2, 1])
        self.assertEqual([call["continuation_token"] for call in provider.list_calls], [None, "1", "2"])

    def test_pages_are_fetched_lazily(self):
        provider = FakeProvider({"c": sized({f"f{i}": 1 for i in range(5)})}, page_size=2)
        pages = iter_pages(provider, "c", None, "/")
        next(pages)
        self.assertEqual(len(provider.list_calls), 1)


class BlobListerTests(unittest.TestCase):
    def setUp(self):
        self.provider = FakeProvider({"media": sized(PHOTOS)}, page_size=2)
        self.lister = BlobLister(self.provider)

    def test_directory_pattern_yields_rebuilt_prefixes(self):
        entries = self.lister.collect(plan_listing("media", "photos/*/"))
        self.assertEqual(entries, [Prefix("photos/2023/"), Prefix("photos/2024/")])
        self.assertTrue(all(call["delimiter"] is None for call in self.provider.list_calls))
        self.assertEqual(self.provider.list_calls[0]["prefix"], "photos/")

    def test_recursive_wildcard_lists_every_blob_without_recursive_flag(self):
        entries = self.lister.collect(plan_listing("media", "photos/**/*.jpg", recursive=False))
        self.assertEqual(
            sorted(names(entries)),
            ["photos/2023/c.jpg", "photos/2024/a.jpg", "photos/2024/b.jpg"],
        )
        self.assertTrue(all(isinstance(entry, Blob) for entry in entries))

    def test_multi_segment_file_pattern_lists_blobs_without_recursive_flag(self):
        self.provider.containers["media"]["photos/2024/raw/d.jpg"] = b"d"
        entries = self.lister.collect(plan_listing("media", "photos/*/*.jpg"))
        self.assertEqual(
            [(entry.name, entry.size) for entry in entries],
            [("photos/2023/c.jpg", 50), ("photos/2024/a.jpg", 100), ("photos/2024/b.jpg", 200)],
        )
        self.assertTrue(all(isinstance(entry, Blob) for entry in entries))
        self.assertTrue(all(call["delimiter"] is None for call in self.provider.list_calls))

    def test_multi_segment_exact_name(self):
        entries = self.lister.collect(plan_listing("media", "photos/*/a.jpg"))
        self.assertEqual(names(entries), ["photos/2024/a.jpg"])
        self.assertIsInstance(entries[0], Blob)

    def test_nested_directory_pattern(self):
        self.provider.containers["media"]["photos/2024/raw/d.jpg"] = b"d"
        self.provider.containers["media"]["photos/2023/jpg/e.jpg"] = b"e"
        entries = self.lister.collect(plan_listing("media", "photos/*/raw/"))
        self.assertEqual(entries, [Prefix("photos/2024/raw/")])
        self.assertTrue(all(call["delimiter"] is None for call in self.provider.list_calls))
        self.assertEqual(self.provider.list_calls[0]["prefix"], "photos/")

    def test_single_level_pattern_filters_a_delimited_listing(self):
        self.provider.containers["media"]["photos/2024/notes.txt"] = b"n"
        entries = self.lister.collect(plan_listing("media", "photos/2024/*.jpg"))
        self.assertEqual(names(entries), ["photos/2024/a.jpg", "photos/2024/b.jpg"])
        self.assertEqual(self.provider.list_calls[0]["delimiter"], "/")

    def test_single_level_pattern_matches_service_prefixes(self):
        entries = self.lister.collect(plan_listing("media", "photos/2*"))
        self.assertEqual(entries, [Prefix("photos/2023/"), Prefix("photos/2024/")])

    def test_explicit_recursion_filters_full_names(self):
        self.provider.containers["media"]["photos/2024/raw/d.jpg"] = b"d"
        entries = self.lister.collect(plan_listing("media", "photos/*/*.jpg", recursive=True))
        self.assertEqual(
            sorted(names(entries)),
            ["photos/2023/c.jpg", "photos/2024/a.jpg", "photos/2024/b.jpg"],
        )

    def test_no_matches_is_an_empty_result(self):
        collector = EntryCollector()
        count = self.lister.list(plan_listing("media", "photos/*.png"), collector)
        self.assertEqual(count, 0)
        self.assertEqual(collector.entries, [])

    def test_stream_hands_each_page_over_before_the_next_request(self):
        provider = FakeProvider({"c": sized({f"f{i}": 1 for i in range(5)})}, page_size=2)
        calls_seen = []

        def consumer(items):
            calls_seen.append((len(items), len(provider.list_calls)))

        count = BlobLister(provider).list(ListingPlan("c"), consumer)
        self.assertEqual(count, 5)
        self.assertEqual(calls_seen, [(2, 1), (2, 2), (1, 3)])

    def test_failure_mid_stream_keeps_what_was_consumed(self):
        provider = FakeProvider({"c": sized({f"f{i}": 1 for i in range(5)})}, page_size=2, fail_on_page=1)
        collector = EntryCollector()
        with self.assertRaises(ConnectionError):
            BlobLister(provider).stream(ListingPlan("c"), collector)
        self.assertEqual(names(collector.entries), ["f0", "f1"])

    def test_missing_container_propagates(self):
        with self.assertRaises(FileNotFoundError):
            self.lister.collect(plan_listing("nope", "*.txt"))


class ReconstructPrefixesTests(unittest.TestCase):
    def test_matches_delimited_listing(self):
        keys = dict(PHOTOS)
        keys["photos/readme.txt"] = 10
        keys["photos/2024/raw/d.jpg"] = 5
        provider = FakeProvider({"media": sized(keys)}, page_size=100)

        delimited = provider.list_blobs_page("media", "photos/", "/").items
        flat = provider.list_blobs_page("media", "photos/", None).items

        expected = {entry.name for entry in delimited if isinstance(entry, Prefix)}
        rebuilt = {entry.name for entry in reconstruct_prefixes(flat, "photos/", "*", 1)}
        self.assertEqual(rebuilt, expected)

    def test_blob_at_cut_depth_is_not_a_directory(self):
        entries = [Blob("photos/readme.txt", 1)]
        self.assertEqual(reconstruct_prefixes(entries, "photos/", "*", 1), [])

    def test_blob_at_cut_depth_kept_when_asked(self):
        entries = [Blob("photos/2024/a.jpg", 1), Blob("photos/2024/b.png", 1), Blob("photos/2024/raw/c.jpg", 1)]
        self.assertEqual(
            reconstruct_prefixes(entries, "photos/", "*/*.jpg", 2, keep_blobs=True),
            [Blob("photos/2024/a.jpg", 1)],
        )

    def test_no_list_prefix(self):
        entries = [Blob("a/1.txt", 1), Blob("b/2.txt", 1), Blob("a/3.txt", 1)]
        self.assertEqual(reconstruct_prefixes(entries, None, "*", 1), [Prefix("a/"), Prefix("b/")])

    def test_only_matching_directories_survive(self):
        entries = [Blob("logs/2023/x", 1), Blob("logs/2024/y", 1), Blob("logs/old/z", 1)]
        self.assertEqual(
            reconstruct_prefixes(entries, "logs/", "20*", 1),
            [Prefix("logs/2023/"), Prefix("logs/2024/")],
        )


if __name__ == "__main__":
    unittest.main()
