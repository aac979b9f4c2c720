"""
Test unitari per parser righe listino e deduplicazione.
"""
from ingest.dedup import dedupe_names
from ingest.parser import candidate_from_line, extract_product_names, should_skip


class TestParser:
    """Test per estrazione candidati."""

    def test_header_dropped(self):
        text = "1 | Dalfi Dark Chocolate\n2 | Lotus Spread\nSr. No | Item List"
        assert extract_product_names(text) == ["Dalfi Dark Chocolate", "Lotus Spread"]

    def test_skip_patterns(self):
        assert should_skip("SUPER TRADERS")
        assert should_skip("Item List")
        assert should_skip("Page 2 of 3")
        assert should_skip("Table of Contents")
        assert should_skip("42")
        assert not should_skip("Davidoff Coffee")

    def test_ordinal_forms(self):
        assert candidate_from_line("1. Bavaria Malt Drink") == "Bavaria Malt Drink"
        assert candidate_from_line("12) Cocon Jelly") == "Cocon Jelly"
        assert candidate_from_line("7 Yogo Candy") == "Yogo Candy"

    def test_pipe_columns_joined(self):
        assert candidate_from_line("3 | Nutella | 350g") == "Nutella 350g"

    def test_short_and_numeric_candidates_dropped(self):
        text = "1 | ab\n2 | 12345\n3 | Tea"
        assert extract_product_names(text) == ["Tea"]

    def test_duplicates_kept(self):
        """La deduplicazione è uno stage separato."""
        text = "1 | Davidoff Coffee\n2 | davidoff coffee"
        assert extract_product_names(text) == ["Davidoff Coffee", "davidoff coffee"]

    def test_empty_text(self):
        assert extract_product_names("") == []
        assert extract_product_names("\n\n   \n") == []

    def test_windows_line_breaks(self):
        assert extract_product_names("1 | Lotus Spread\r\n2 | Davidoff Coffee") == [
            "Lotus Spread",
            "Davidoff Coffee",
        ]


class TestDedup:
    """Test per deduplicazione nomi."""

    def test_first_seen_form_kept(self):
        names = ["Lotus Spread", "Davidoff Coffee", "LOTUS SPREAD ", "lotus spread"]
        assert dedupe_names(names) == ["Lotus Spread", "Davidoff Coffee"]

    def test_order_preserved(self):
        assert dedupe_names(["b", "a", "B", "c"]) == ["b", "a", "c"]

    def test_empty(self):
        assert dedupe_names([]) == []
