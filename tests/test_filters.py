import pytest

from field_codec import to_publication
from filters import Facets, Filters, Stats, facets, filter_publications, search, stats
from models import Publication


def _pub(publication_id: str, **fields: object) -> Publication:
    return to_publication(publication_id, fields)


@pytest.fixture()
def catalog() -> list[Publication]:
    return [
        _pub(
            "p1",
            title="Bone Density Loss on Mars Missions",
            abstract="Mice were flown for 30 days.",
            research_domains=["space_biology", "physiology"],
            biological_systems=["mouse"],
            publication_year=2021,
            experiment_duration_days=30,
        ),
        _pub(
            "p2",
            title="Arabidopsis Root Growth in Microgravity",
            key_findings=["Roots skewed toward light on MARS analog"],
            research_domains='["plant_biology", "space_biology"]',
            biological_systems='["arabidopsis"]',
            publication_year=2020,
            experiment_duration_days=11,
        ),
        _pub(
            "p3",
            title="Radiation and Yeast",
            abstract="Yeast cultures under cosmic radiation.",
            research_domains="not valid json",
            biological_systems=["yeast"],
            publication_year=2021,
        ),
    ]


def test_search_empty_term_returns_all_in_order(catalog: list[Publication]) -> None:
    assert search(catalog, "") == catalog
    assert search(catalog, "   ") == catalog


def test_search_is_case_insensitive(catalog: list[Publication]) -> None:
    upper = search(catalog, "Mars")
    lower = search(catalog, "mars")

    assert upper == lower
    assert [p.publication_id for p in upper] == ["p1", "p2"]


def test_search_matches_findings_and_abstract(catalog: list[Publication]) -> None:
    assert [p.publication_id for p in search(catalog, "skewed toward")] == ["p2"]
    assert [p.publication_id for p in search(catalog, "cosmic")] == ["p3"]


def test_search_trims_term(catalog: list[Publication]) -> None:
    assert [p.publication_id for p in search(catalog, "  yeast  ")] == ["p3"]


def test_search_is_substring_based(catalog: list[Publication]) -> None:
    assert [p.publication_id for p in search(catalog, "icrograv")] == ["p2"]


def test_search_no_match(catalog: list[Publication]) -> None:
    assert search(catalog, "tardigrade") == []


def test_filter_without_criteria_returns_all(catalog: list[Publication]) -> None:
    assert filter_publications(catalog, Filters()) == catalog


def test_filter_by_domain_decodes_encoded_tags(catalog: list[Publication]) -> None:
    result = filter_publications(catalog, Filters(domain="plant_biology"))
    assert [p.publication_id for p in result] == ["p2"]


def test_filter_is_conjunctive(catalog: list[Publication]) -> None:
    by_domain = filter_publications(catalog, Filters(domain="space_biology"))
    by_domain_and_year = filter_publications(catalog, Filters(domain="space_biology", year=2021))
    by_all = filter_publications(catalog, Filters(domain="space_biology", system="arabidopsis", year=2021))

    assert [p.publication_id for p in by_domain] == ["p1", "p2"]
    assert [p.publication_id for p in by_domain_and_year] == ["p1"]
    assert by_all == []


@pytest.mark.parametrize("extra", [
    {"system": "mouse"},
    {"year": 2020},
    {"system": "yeast", "year": 2021},
])
def test_adding_criterion_never_grows_result(catalog: list[Publication], extra: dict) -> None:
    base = filter_publications(catalog, Filters(domain="space_biology"))
    narrowed = filter_publications(catalog, Filters(domain="space_biology", **extra))

    assert len(narrowed) <= len(base)
    assert all(p in base for p in narrowed)


def test_malformed_domains_never_match_domain_filter(catalog: list[Publication]) -> None:
    malformed = catalog[2]
    assert malformed.research_domains == ()

    for domain in ("space_biology", "physiology", "plant_biology", "not valid json"):
        assert malformed not in filter_publications(catalog, Filters(domain=domain))


def test_facets_sorted_and_distinct(catalog: list[Publication]) -> None:
    result = facets(catalog)

    assert result == Facets(
        domains=("physiology", "plant_biology", "space_biology"),
        systems=("arabidopsis", "mouse", "yeast"),
        years=(2021, 2020),
    )


def test_facets_skip_records_without_tags() -> None:
    result = facets([_pub("p1"), _pub("p2", research_domains="")])
    assert result == Facets(domains=(), systems=(), years=())


def test_year_scenario_facet_and_filter() -> None:
    pubs = [
        _pub("a", title="A", publication_year=2020),
        _pub("b", title="B", publication_year=2021),
        _pub("c", title="C", publication_year=2021),
    ]

    assert facets(pubs).years == (2021, 2020)
    assert [p.publication_id for p in filter_publications(pubs, Filters(year=2021))] == ["b", "c"]


def test_stats_on_catalog(catalog: list[Publication]) -> None:
    # (30 + 11) / 2 = 20.5 rounds half up.
    assert stats(catalog) == Stats(total=3, domain_count=3, avg_duration_days=21)


def test_stats_on_empty_set() -> None:
    assert stats([]) == Stats(total=0, domain_count=0, avg_duration_days=0)


def test_stats_without_durations() -> None:
    assert stats([_pub("a"), _pub("b", experiment_duration_days=0)]).avg_duration_days == 0


def test_stats_average_includes_fractional_durations() -> None:
    pubs = [_pub("a", experiment_duration_days=12.5), _pub("b", experiment_duration_days=10)]
    assert stats(pubs).avg_duration_days == 11
