from finai.catalog import AGGRESSIVE, BALANCED, CONSERVATIVE, load_catalog


def test_catalog_counts():
    catalog = load_catalog()

    assert len(catalog.companies) == 12
    assert len(catalog.funds) == 12
    assert len(catalog.strategies) == 4
    assert set(catalog.suggestions) == {CONSERVATIVE, BALANCED, AGGRESSIVE}


def test_catalog_is_loaded_once():
    assert load_catalog() is load_catalog()


def test_every_fund_has_a_company():
    catalog = load_catalog()
    for fund in catalog.funds:
        assert catalog.company_by_id(fund.company_id) is not None


def test_strategy_allocations_sum_to_100():
    for strategy in load_catalog().strategies:
        assert sum(line.percentage for line in strategy.allocation) == 100


def test_lookups():
    catalog = load_catalog()

    assert catalog.fund_by_id("nippon-1").type == "tax-saving"
    assert catalog.fund_by_id("missing") is None
    assert catalog.strategy_by_name("Tax-Efficient Growth").risk == "medium"
    assert [f.id for f in catalog.funds_with_risk("low")] == ["kotak-1", "hdfc-2", "aditya-1"]
    assert catalog.suggestions_for("unknown") == ()


def test_suggestion_base_return():
    first = load_catalog().suggestions_for(CONSERVATIVE)[0]

    assert first.return_rate == "7-8%"
    assert first.base_return == 7.0
