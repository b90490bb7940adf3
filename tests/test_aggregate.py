"""Tests for top-N frequency aggregation."""

from marketpulse.pipeline.aggregate import top_counts, top_term_counts


class TestTopCounts:

    def test_counts_sorted_descending(self):
        out = top_counts(["b", "a", "b", "c", "b", "a"])
        assert out == [
            {"name": "b", "count": 3},
            {"name": "a", "count": 2},
            {"name": "c", "count": 1},
        ]

    def test_ties_keep_first_seen_order(self):
        out = top_counts(["x", "y", "z", "y", "x", "z"], limit=3)
        assert [r["name"] for r in out] == ["x", "y", "z"]

    def test_reordered_input_keeps_counts(self):
        keys = ["x", "y", "z", "y", "x", "z", "w"]
        a = {r["name"]: r["count"] for r in top_counts(keys, limit=10)}
        b = {r["name"]: r["count"] for r in top_counts(list(reversed(keys)), limit=10)}
        assert a == b

    def test_limit_truncates_after_sorting(self):
        keys = ["a"] + ["b"] * 2 + ["c"] * 2 + ["d"] * 3 + ["e"]
        out = top_counts(keys, limit=2)
        assert out == [{"name": "d", "count": 3}, {"name": "b", "count": 2}]

    def test_never_more_than_limit(self):
        out = top_counts([str(i) for i in range(50)], limit=5)
        assert len(out) == 5
        assert [r["name"] for r in out] == ["0", "1", "2", "3", "4"]

    def test_empty_keys_skipped(self):
        items = [{"org": "NASA"}, {"org": ""}, {"org": None}, {}, {"org": "NASA"}]
        out = top_counts(items, lambda it: it.get("org"))
        assert out == [{"name": "NASA", "count": 2}]

    def test_deterministic(self):
        keys = ["q", "r", "q", "s", "r", "t"]
        assert top_counts(keys) == top_counts(keys)

    def test_empty_input(self):
        assert top_counts([]) == []


class TestTopTermCounts:

    def test_title_counts_for_every_matching_term(self):
        out = top_term_counts(["Generative AI Engineer"])
        assert out == [{"term": "ai", "count": 1}, {"term": "generative ai", "count": 1}]

    def test_counts_and_order(self):
        titles = [
            "Prompt Engineer",
            "AI Engineer",
            "Machine Learning Engineer",
            "AI Policy Analyst",
            "Prompt Designer",
            "Chairperson",
        ]
        out = top_term_counts(titles)
        assert out == [
            {"term": "prompt", "count": 2},
            {"term": "ai", "count": 2},
            {"term": "machine learning", "count": 1},
        ]

    def test_limit(self):
        titles = ["AI artificial intelligence generative ai chatgpt llm machine learning prompt"]
        assert len(top_term_counts(titles, limit=6)) == 6
