import pytest

from brandos import sources


def test_every_source_sits_in_a_known_category():
    assert sources.ALL_SOURCES
    assert {s.category for s in sources.ALL_SOURCES} <= set(sources.CATEGORIES)
    assert len(sources.list_source_names()) == len(sources.ALL_SOURCES)


@pytest.mark.parametrize("category", sources.CATEGORIES)
def test_get_sources_by_category(category):
    picked = sources.get_sources_by_category(category)
    assert picked
    assert all(s.category == category for s in picked)
    assert [s.name for s in picked] == [s.name for s in sources.ALL_SOURCES if s.category == category]


def test_unknown_category_is_empty():
    assert sources.get_sources_by_category("finance") == []


def test_get_high_priority_sources():
    high = sources.get_high_priority_sources()
    assert high
    assert all(s.priority == 1 for s in high)
    assert sources.get_source("Smashing Magazine") in high


def test_daily_fetch_orders_by_priority():
    daily = sources.get_sources_for_daily_fetch()
    priorities = [s.priority for s in daily]
    assert priorities == sorted(priorities)
    assert max(priorities) <= 2
    assert daily[:len(sources.get_high_priority_sources())] == sources.get_high_priority_sources()


def test_get_source_unknown_name():
    with pytest.raises(KeyError):
        sources.get_source("Nope")
