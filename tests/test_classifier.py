"""
Test per classificatore categorie, icone e match prodotto → categoria.
"""
import pytest

from ingest.classifier import classify_by_keywords, classify_categories
from ingest.icons import DEFAULT_ICON, category_description, resolve_icon
from ingest.matcher import match_category
from tests.mocks import FakeCompletionClient


class TestKeywordClassifier:
    """Test per fallback deterministico."""

    def test_spread_before_chocolates(self):
        assert classify_by_keywords(["Nutella Spread 200g", "Davidoff Coffee"]) == ["Chocolate Spreads", "Coffee"]

    def test_alphabetical(self):
        result = classify_by_keywords(["Dalfi Dark Chocolate", "Nutella Spread 200g", "Bavaria Malt Drink"])
        assert result == ["Chocolate Spreads", "Chocolates", "Malt Drinks"]

    def test_deterministic(self):
        names = ["Cocon Jelly Lychee", "Davidoff Coffee", "Tiger Biscuits Small", "Tiger Biscuits Large"]
        assert classify_by_keywords(names) == classify_by_keywords(list(names))

    def test_ad_hoc_group_from_first_word(self):
        assert classify_by_keywords(["Tiger Biscuits Small", "Tiger Biscuits Large"]) == ["Tiger"]

    def test_catch_all_when_many_unclaimed(self):
        names = ["Almond Biscuits", "Basmati Grains", "Cashew Nuts", "Dried Figs"]
        assert classify_by_keywords(names) == ["Other Products"]

    def test_default_category_when_nothing_else(self):
        assert classify_by_keywords(["Almond Biscuits", "Cashew Nuts", "Dried Figs"]) == ["Products"]


class TestClassifyCategories:
    """Test per classificazione IA con fallback."""

    @pytest.mark.asyncio
    async def test_empty_input_no_ai_call(self):
        ai = FakeCompletionClient(responses=[["Coffee"]])
        categories, used_ai = await classify_categories([], ai)

        assert categories == []
        assert used_ai is False
        assert ai.call_count == 0

    @pytest.mark.asyncio
    async def test_ai_success(self):
        ai = FakeCompletionClient(responses=[["Chocolates", "Coffee", "Chocolates", "  "]])
        categories, used_ai = await classify_categories(["Nutella Spread 200g", "Davidoff Coffee"], ai)

        assert categories == ["Chocolates", "Coffee"]
        assert used_ai is True
        assert ai.call_count == 1
        assert "1. Nutella Spread 200g" in ai.calls[0]["user"]
        assert "2. Davidoff Coffee" in ai.calls[0]["user"]

    @pytest.mark.asyncio
    async def test_ai_long_names_dropped(self):
        ai = FakeCompletionClient(responses=[["Coffee", "C" * 60]])
        categories, used_ai = await classify_categories(["Davidoff Coffee"], ai)

        assert categories == ["Coffee"]
        assert used_ai is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", ["malformed", "timeout", "error", "connection"])
    async def test_ai_failure_falls_back(self, mode):
        ai = FakeCompletionClient(mode=mode)
        categories, used_ai = await classify_categories(["Nutella Spread 200g", "Davidoff Coffee"], ai)

        assert categories == ["Chocolate Spreads", "Coffee"]
        assert used_ai is False
        assert ai.call_count == 1

    @pytest.mark.asyncio
    async def test_no_ai(self):
        categories, used_ai = await classify_categories(["Davidoff Coffee"], None)
        assert categories == ["Coffee"]
        assert used_ai is False


class TestIcons:
    """Test per icone categoria."""

    def test_known_categories(self):
        assert resolve_icon("Chocolates") == "🍫"
        assert resolve_icon("Chocolate Spreads") == "🥜"
        assert resolve_icon("coffee") == "☕"

    def test_substring_match(self):
        assert resolve_icon("Hot Coffee Beans") == "☕"
        assert resolve_icon("Drinks") == "🥤"

    def test_keyword_match(self):
        assert resolve_icon("Dark Chocolate Bars") == "🍫"

    def test_default(self):
        assert resolve_icon("Stationery") == DEFAULT_ICON
        assert resolve_icon("") == DEFAULT_ICON

    def test_description(self):
        assert category_description("Malt Drinks") == "Category for malt drinks"


class TestMatcher:
    """Test per match prodotto → categoria."""

    def test_word_match(self):
        assert match_category("Davidoff Coffee Rich", ["Chocolates", "Coffee"]) == "Coffee"
        assert match_category("Lotus Biscoff Spread", ["Chocolates", "Spread Jars"]) == "Spread Jars"

    def test_short_words_ignored(self):
        assert match_category("Ice Tea Lemon", ["Beverages", "Ice Tea"]) == "Beverages"

    def test_first_category_fallback(self):
        assert match_category("Mystery Box", ["Jellies", "Coffee"]) == "Jellies"

    def test_empty_categories(self):
        assert match_category("Mystery Box", []) == "Products"
