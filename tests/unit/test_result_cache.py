from dataclasses import dataclass

import pytest
from hypothesis import given
from hypothesis import strategies as st

from awt.cache import Create, Delete, Load, ResultCache, TurnPage, Update, merge_record, record_id, replay
from awt.exceptions import (
    CacheError,
    ConflictError,
    DuplicateRecordError,
    NotFoundError,
    RecordNotFoundError,
    ValidationError,
)


def ids(records):
    return [record["id"] for record in records]


def mapping_records(count):
    return [{"id": f"R{index}", "value": index} for index in range(count)]


@pytest.fixture
def loaded():
    cache = ResultCache(page_size=15)
    cache.load("SKU", mapping_records(32))
    return cache


def test_load_shows_first_page(loaded):
    assert loaded.current_page == 1
    assert loaded.page_count == 3
    assert ids(loaded.visible) == [f"R{index}" for index in range(15)]
    assert loaded.query == "SKU"


def test_empty_result_has_one_empty_page():
    cache = ResultCache(page_size=15)

    assert cache.load("nothing", []) == []
    assert cache.page_count == 1
    assert cache.get_page(5) == []
    assert cache.current_page == 1


@pytest.mark.parametrize(("requested", "expected"), [(0, 1), (-4, 1), (3, 3), (99, 3)])
def test_get_page_clamps_into_range(loaded, requested, expected):
    loaded.get_page(requested)

    assert loaded.current_page == expected


def test_last_page_holds_remainder(loaded):
    assert ids(loaded.get_page(3)) == ["R30", "R31"]


def test_delete_walkthrough_on_last_page(loaded):
    loaded.get_page(3)

    loaded.apply_delete("R31")
    assert ids(loaded.visible) == ["R30"]
    assert loaded.current_page == 3

    removed = loaded.apply_delete("R30")
    assert removed["id"] == "R30"
    assert loaded.total_count == 30
    assert loaded.page_count == 2
    assert loaded.current_page == 2
    assert len(loaded.visible) == 15


def test_delete_only_record_moves_back_one_page():
    cache = ResultCache(page_size=5)
    cache.load("q", mapping_records(11))
    cache.get_page(3)

    cache.apply_delete("R10")

    assert cache.current_page == 2


def test_delete_last_record_stays_on_page_one():
    cache = ResultCache(page_size=5)
    cache.load("q", mapping_records(1))

    cache.apply_delete("R0")

    assert cache.current_page == 1
    assert cache.visible == []


def test_delete_on_earlier_page_keeps_current_page(loaded):
    loaded.get_page(2)

    loaded.apply_delete("R0")

    assert loaded.current_page == 2
    assert ids(loaded.visible)[0] == "R16"


def test_create_appends_at_end(loaded):
    loaded.apply_create({"id": "NEW", "value": -1})

    assert loaded.total_count == 33
    assert loaded.page_count == 3
    assert ids(loaded.get_page(3)) == ["R30", "R31", "NEW"]


def test_create_with_colliding_id_signals_conflict(loaded):
    before = loaded.records

    with pytest.raises(DuplicateRecordError) as exc_info:
        loaded.apply_create({"id": "R3", "value": 99})

    assert isinstance(exc_info.value, ConflictError)
    assert isinstance(exc_info.value, CacheError)
    assert exc_info.value.status_code == 409
    assert loaded.records == before


def test_update_merges_patch_in_place(loaded):
    updated = loaded.apply_update("R5", {"value": 500})

    assert updated == {"id": "R5", "value": 500}
    assert loaded.records[5] == updated
    assert loaded.total_count == 32


def test_update_accepts_full_replacement(loaded):
    loaded.apply_update("R5", {"id": "R5", "value": "replaced"})

    assert loaded.get("R5")["value"] == "replaced"


def test_update_cannot_change_id(loaded):
    with pytest.raises(ValidationError):
        loaded.apply_update("R5", {"id": "R500"})

    assert loaded.contains("R5")
    assert not loaded.contains("R500")


@pytest.mark.parametrize("operation", ["update", "delete"])
def test_missing_target_signals_not_found(loaded, operation):
    before = loaded.records

    with pytest.raises(RecordNotFoundError) as exc_info:
        if operation == "update":
            loaded.apply_update("missing", {"value": 1})
        else:
            loaded.apply_delete("missing")

    assert isinstance(exc_info.value, NotFoundError)
    assert exc_info.value.record_id == "missing"
    assert loaded.records == before


def test_page_size_must_be_positive():
    with pytest.raises(ValidationError):
        ResultCache(page_size=0)


def test_records_returns_a_copy(loaded):
    loaded.records.clear()

    assert loaded.total_count == 32


def test_view_reports_pagination(loaded):
    loaded.get_page(3)
    view = loaded.view()

    assert view.page == 3
    assert view.total_pages == 3
    assert view.total_count == 32
    assert view.count == 2
    assert view.first_index == 31
    assert view.has_prev
    assert not view.has_next


def test_subset_is_a_new_epoch_with_same_page_size(loaded):
    loaded.get_page(2)

    derived = loaded.subset(loaded.records[:20])

    assert derived.page_size == 15
    assert derived.current_page == 1
    assert derived.page_count == 2
    assert loaded.current_page == 2


def test_dispatch_applies_commands(loaded):
    view = loaded.dispatch(TurnPage(3))
    assert view.page == 3

    view = loaded.dispatch(Delete("R31"))
    assert view.count == 1

    view = loaded.dispatch(Create({"id": "X", "value": 0}))
    assert view.total_count == 32

    view = loaded.dispatch(Update("X", {"value": 7}))
    assert loaded.get("X") == {"id": "X", "value": 7}

    view = loaded.dispatch(Load("other", mapping_records(3)))
    assert view.query == "other"
    assert view.page == 1
    assert view.total_pages == 1


def test_dispatch_rejects_unknown_command(loaded):
    with pytest.raises(CacheError):
        loaded.dispatch("not a command")


def test_replay_folds_commands_into_state():
    commands = [
        Load("q", mapping_records(32)),
        TurnPage(3),
        Delete("R31"),
        Delete("R30"),
        Create({"id": "NEW"}),
    ]

    cache = replay(commands, page_size=15)

    assert cache.total_count == 31
    assert cache.current_page == 2
    assert ids(cache.records)[-1] == "NEW"


def test_record_id_reads_models_mappings_and_objects(product_factory):
    @dataclass
    class Row:
        id: int

    assert record_id({"id": 7}) == "7"
    assert record_id(Row(id=3)) == "3"
    assert record_id(product_factory(1)) == "MLB4000000001"

    with pytest.raises(ValidationError):
        record_id({"name": "no id"})


def test_merge_record_patches_models_and_dataclasses(product_factory):
    @dataclass(frozen=True)
    class Row:
        id: str
        value: int

    product = product_factory(1)

    patched = merge_record(product, {"sku": "NEW-SKU"})
    assert patched.sku == "NEW-SKU"
    assert product.sku == "SKU-001"

    assert merge_record(Row("a", 1), {"value": 2}) == Row("a", 2)

    with pytest.raises(CacheError):
        merge_record(object(), {"value": 2})


def test_cache_holds_product_models(products):
    cache = ResultCache(page_size=15)
    cache.load("SKU", products)

    updated = cache.apply_update(products[20].id, {"company": "NEW"})

    assert updated.company == "NEW"
    assert cache.get(products[20].id).company == "NEW"


@pytest.mark.property
@given(st.integers(min_value=1, max_value=120), st.integers(min_value=1, max_value=25))
def test_pages_partition_full_set(total, page_size):
    records = mapping_records(total)
    cache = ResultCache(page_size=page_size)
    cache.load("q", records)

    pages = [cache.get_page(page) for page in range(1, cache.page_count + 1)]

    assert all(pages)
    assert [record for page in pages for record in page] == records
    assert len(cache.get_page(1)) == min(page_size, total)


@pytest.mark.property
@given(
    st.integers(min_value=1, max_value=60),
    st.integers(min_value=1, max_value=10),
    st.data(),
)
def test_current_page_always_in_range_after_deletes(total, page_size, data):
    cache = ResultCache(page_size=page_size)
    cache.load("q", mapping_records(total))
    cache.get_page(data.draw(st.integers(min_value=1, max_value=cache.page_count)))

    deletions = data.draw(st.integers(min_value=1, max_value=total))
    for _ in range(deletions):
        victim = data.draw(st.sampled_from(ids(cache.records)))
        cache.apply_delete(victim)
        assert 1 <= cache.current_page <= cache.page_count
        assert cache.visible or cache.total_count == 0


def test_load_keeps_first_record_of_repeated_ids():
    records = [{"id": "A", "value": 1}, {"id": "B", "value": 2}, {"id": "A", "value": 3}]
    cache = ResultCache(page_size=15)

    cache.load("q", records)

    assert cache.records == records[:2]
    cache.apply_delete("A")
    assert not cache.contains("A")
    assert cache.total_count == 1
