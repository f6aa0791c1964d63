from src.common.geo import validate_coordinates
from src.store.entry_store import EntryStore
from src.store.sample_data import LAT_RANGE, LNG_RANGE, generate_sample_entries, load_sample_data


def test_sample_entries_are_reproducible(now):
    first = generate_sample_entries(40, now=now, seed=3)
    second = generate_sample_entries(40, now=now, seed=3)

    assert first == second
    assert len({entry.id for entry in first}) == 40


def test_sample_entries_stay_in_bounds(now):
    entries = generate_sample_entries(200, now=now, seed=11)

    positioned = [entry for entry in entries if entry.position is not None]
    assert 0 < len(positioned) < len(entries)
    for entry in positioned:
        validate_coordinates(entry.position.latitude, entry.position.longitude)
        assert LAT_RANGE[0] <= entry.position.latitude <= LAT_RANGE[1]
        assert LNG_RANGE[0] <= entry.position.longitude <= LNG_RANGE[1]
    assert all(entry.timestamp <= now for entry in entries)
    assert all(entry.food for entry in entries)


def test_load_sample_data_fills_the_store(now):
    store = EntryStore()
    assert load_sample_data(store, 25, now=now, seed=1) == 25
    assert len(store.list_entries()) == 25
    assert store.profile.name == "Bobby"
    assert store.food_history
