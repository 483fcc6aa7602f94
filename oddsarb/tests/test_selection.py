"""Tests for best-price selection, top-K ranking and combination search."""

from __future__ import annotations

import logging

import pytest

from oddsarb.arbitrage.selection import (
    BestPriceSelector,
    OutcomePrice,
    PriceCandidate,
    TopKPriceRanker,
    count_combinations,
    generate_combinations,
)


def candidates(*prices: float, prefix: str = "bk") -> list[PriceCandidate]:
    return [PriceCandidate(bookmaker=f"{prefix}{i}", price=p) for i, p in enumerate(prices)]


class TestBestPriceSelector:
    def test_picks_highest_price_per_outcome(self, two_bookmaker_fixture):
        selector = BestPriceSelector()
        best = selector.select(
            "101", ["101", "102"], two_bookmaker_fixture, ["bookmaker1", "bookmaker2"]
        )

        assert best["101"] == PriceCandidate("bookmaker1", 2.5)
        assert best["102"] == PriceCandidate("bookmaker1", 2.5)

    def test_mixes_bookmakers_across_outcomes(self, make_fixture):
        fixture = make_fixture({
            "x": {"101": {"101": 2.5, "102": 1.6}},
            "y": {"101": {"101": 1.5, "102": 2.1}},
        })
        best = BestPriceSelector().select("101", ["101", "102"], fixture, ["x", "y"])

        assert best["101"].bookmaker == "x"
        assert best["102"].bookmaker == "y"

    def test_tie_goes_to_smallest_bookmaker_name(self, make_fixture):
        fixture = make_fixture({
            "zebra": {"101": {"101": 2.4, "102": 2.0}},
            "alpha": {"101": {"101": 2.4, "102": 2.0}},
        })
        # Caller order must not matter
        best = BestPriceSelector().select("101", ["101", "102"], fixture, ["zebra", "alpha"])

        assert best["101"].bookmaker == "alpha"
        assert best["102"].bookmaker == "alpha"

    def test_skips_inactive_and_invalid_quotes(self, make_fixture):
        fixture = make_fixture({
            "a": {"101": {"101": (5.0, False), "102": 1.0}},
            "b": {"101": {"101": 2.0, "102": 0.9}},
        })
        best = BestPriceSelector().select("101", ["101", "102"], fixture, ["a", "b"])

        assert best == {"101": PriceCandidate("b", 2.0)}

    def test_outcome_without_quotes_is_absent(self, make_fixture):
        fixture = make_fixture({"a": {"101": {"101": 2.0}}})
        best = BestPriceSelector().select("101", ["101", "102"], fixture, ["a"])
        assert "102" not in best


class TestTopKPriceRanker:
    @pytest.fixture
    def four_book_fixture(self, make_fixture):
        return make_fixture({
            "a": {"101": {"101": 2.0, "102": 1.9}},
            "b": {"101": {"101": 2.3, "102": 1.8}},
            "c": {"101": {"101": 2.1, "102": (2.6, False)}},
            "d": {"101": {"101": 2.2, "102": 1.95}},
        })

    def test_sorted_descending_and_truncated(self, four_book_fixture):
        ranked = TopKPriceRanker().rank("101", four_book_fixture, ["a", "b", "c", "d"], k=3)

        assert [c.price for c in ranked["101"]] == [2.3, 2.2, 2.1]
        assert [c.bookmaker for c in ranked["101"]] == ["b", "d", "c"]
        # Inactive 2.6 from c is excluded
        assert [c.price for c in ranked["102"]] == [1.95, 1.9, 1.8]

    def test_k_is_clamped_to_three(self, four_book_fixture):
        ranked = TopKPriceRanker().rank("101", four_book_fixture, ["a", "b", "c", "d"], k=10)
        assert len(ranked["101"]) == 3

    def test_k_below_one_behaves_as_one(self, four_book_fixture):
        ranked = TopKPriceRanker().rank("101", four_book_fixture, ["a", "b", "c", "d"], k=0)
        assert ranked["101"] == [PriceCandidate("b", 2.3)]

    def test_equal_prices_keep_bookmaker_name_order(self, make_fixture):
        fixture = make_fixture({
            "m": {"101": {"101": 2.0}},
            "k": {"101": {"101": 2.0}},
            "z": {"101": {"101": 2.5}},
        })
        ranked = TopKPriceRanker().rank("101", fixture, ["z", "m", "k"], k=3)
        assert [c.bookmaker for c in ranked["101"]] == ["z", "k", "m"]

    def test_unpriced_outcome_gets_empty_list(self, make_fixture):
        fixture = make_fixture({
            "a": {"101": {"101": 2.0, "102": (2.0, False)}},
        })
        ranked = TopKPriceRanker().rank("101", fixture, ["a"], k=3)
        assert ranked["102"] == []


class TestGenerateCombinations:
    def test_count_is_product_of_list_sizes(self):
        lists = {
            "1": candidates(3.0, 2.9),
            "2": candidates(3.0, 2.9, 2.8),
            "3": candidates(3.0, 2.9),
        }
        combos = generate_combinations(lists)

        assert count_combinations(lists) == 12
        assert len(combos) == 12
        assert all(len(c) == 3 for c in combos)

    def test_lexicographic_order_starts_with_best_prices(self):
        lists = {"1": candidates(2.5, 2.4, prefix="x"), "2": candidates(2.2, 2.1, prefix="y")}
        combos = generate_combinations(lists)

        assert combos[0] == (
            OutcomePrice("1", "x0", 2.5),
            OutcomePrice("2", "y0", 2.2),
        )
        assert [(c[0].price, c[1].price) for c in combos] == [
            (2.5, 2.2), (2.5, 2.1), (2.4, 2.2), (2.4, 2.1),
        ]

    def test_empty_factor_yields_nothing(self):
        lists = {"1": candidates(2.0, 2.1), "2": []}
        assert generate_combinations(lists) == []

    def test_no_outcomes_yields_nothing(self):
        assert generate_combinations({}) == []

    def test_aborts_above_cap(self, caplog):
        lists = {str(i): candidates(3.0, 2.9, 2.8) for i in range(4)}

        with caplog.at_level(logging.WARNING, logger="oddsarb.arbitrage.selection"):
            combos = generate_combinations(lists, combination_cap=10)

        assert combos == []
        assert "exceeds the limit of 10" in caplog.text

    def test_four_outcomes_three_candidates_gives_81(self):
        lists = {str(i): candidates(3.0, 2.9, 2.8) for i in range(4)}
        assert len(generate_combinations(lists)) == 81

    def test_count_equal_to_cap_is_enumerated(self):
        lists = {"1": candidates(2.0, 2.1), "2": candidates(2.0, 2.1, 2.2)}
        assert len(generate_combinations(lists, combination_cap=6)) == 6

    def test_deterministic_for_identical_input(self):
        lists = {"1": candidates(2.0, 2.1), "2": candidates(2.0, 2.1, 2.2)}
        assert generate_combinations(lists) == generate_combinations(dict(lists))
