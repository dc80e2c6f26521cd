"""SqlQueryBackend and the search profiles against the seeded SQLite database."""

import pytest

from search_select import (
    BRANCH_SEARCH,
    CLASS_SEARCH,
    STUDENT_SEARCH,
    AnyILike,
    Eq,
    FilterSet,
    In,
    QueryExecutor,
    ScopeResolver,
    SearchSelect,
    SelectionState as St,
    student_profile,
)
from search_select.backend import compile_filters, escape_like


async def _search(backend, profile, term, **scope_ids):
    resolver = ScopeResolver(backend, profile)
    filters = await resolver.resolve(profile.scope_for(**scope_ids))
    if filters is None:
        return []
    return await QueryExecutor(backend, profile).execute(term, filters)


def _ids(candidates):
    return sorted(c.id for c in candidates)


# ----------------------------------------------------------------------
# filter compilation
# ----------------------------------------------------------------------

def test_compile_filters():
    where, params, expanding = compile_filters(FilterSet((
        Eq("branch_id", "B1"),
        In("class_id", ["K1", "K2"]),
        AnyILike(("student_username", "student_name"), "ma"),
    )))

    assert where == (
        "branch_id = :p0 AND class_id IN :p1 AND "
        "(lower(student_username) LIKE lower(:p2) ESCAPE '\\' OR "
        "lower(student_name) LIKE lower(:p2) ESCAPE '\\')"
    )
    assert params == {"p0": "B1", "p1": ["K1", "K2"], "p2": "%ma%"}
    assert expanding == ["p1"]


def test_empty_membership_matches_nothing():
    where, params, _ = compile_filters(FilterSet((In("branch_id", ()),)))
    assert where == "1 = 0"
    assert params == {}


def test_empty_filter_set_matches_everything():
    assert compile_filters(FilterSet())[0] == "1=1"


def test_escape_like():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


def test_identifiers_are_validated(sql_backend):
    with pytest.raises(ValueError):
        sql_backend.select_sync("profiles; DROP TABLE profiles", ("id",), FilterSet())
    with pytest.raises(ValueError):
        compile_filters(FilterSet((Eq("id OR 1=1", "x"),)))


# ----------------------------------------------------------------------
# student search
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_student_search_in_branch(sql_backend):
    found = await _search(sql_backend, STUDENT_SEARCH, "ma", branch_id="B1")
    # Maya, Mark and Kumar; Priya's enrollment is DROPPED
    assert _ids(found) == ["E1", "E2", "E3"]


@pytest.mark.asyncio
async def test_student_search_is_case_insensitive(sql_backend):
    found = await _search(sql_backend, STUDENT_SEARCH, "MAYA", branch_id="B1")
    assert _ids(found) == ["E1"]


@pytest.mark.asyncio
async def test_student_search_matches_username(sql_backend):
    found = await _search(sql_backend, STUDENT_SEARCH, "ravik", branch_id="B1")
    assert [c.display_name for c in found] == ["Ravi Kumar"]


@pytest.mark.asyncio
async def test_like_wildcards_match_literally(sql_backend):
    # unescaped, "_s" would also hit "Mark Thomas"
    assert _ids(await _search(sql_backend, STUDENT_SEARCH, "_s", branch_id="B1")) == ["E1"]
    assert await _search(sql_backend, STUDENT_SEARCH, "a%", branch_id="B1") == []


@pytest.mark.asyncio
async def test_student_search_across_active_branches(sql_backend):
    found = await _search(sql_backend, STUDENT_SEARCH, "ma", coaching_center_id="C1")
    # Omar is only enrolled in the inactive East branch
    assert _ids(found) == ["E1", "E2", "E3", "E4"]


@pytest.mark.asyncio
async def test_center_with_only_inactive_branches(sql_backend):
    assert await _search(sql_backend, STUDENT_SEARCH, "ma", coaching_center_id="C2") == []


@pytest.mark.asyncio
async def test_class_narrowing(sql_backend):
    found = await _search(sql_backend, STUDENT_SEARCH, "ma", branch_id="B1", class_id="K2")
    assert _ids(found) == ["E2"]


@pytest.mark.asyncio
async def test_enrolled_only_can_be_turned_off(sql_backend):
    assert await _search(sql_backend, STUDENT_SEARCH, "pri", branch_id="B1") == []

    found = await _search(sql_backend, student_profile(enrolled_only=False), "pri", branch_id="B1")
    assert [(c.id, c.auxiliary_badge) for c in found] == [("E6", "Maths Foundation")]


@pytest.mark.asyncio
async def test_student_avatars_come_from_profiles(sql_backend):
    found = {c.id: c for c in await _search(sql_backend, STUDENT_SEARCH, "ma", branch_id="B1")}

    assert found["E1"].image_ref == "https://avatars.example.com/maya.png"
    assert found["E2"].image_ref is None
    assert found["E1"].secondary_label == "@maya_s"
    assert found["E1"].scope_label == "Bright Minds North"


# ----------------------------------------------------------------------
# class and branch search
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_class_search_skips_hidden_and_inactive(sql_backend):
    found = await _search(sql_backend, CLASS_SEARCH, "math", branch_id="B1")

    assert _ids(found) == ["K1"]
    (k1,) = found
    assert k1.secondary_label == "Mathematics"
    assert k1.auxiliary_badge == "10th"
    assert k1.detail == "3/30 students"


@pytest.mark.asyncio
async def test_class_search_matches_subject_across_center(sql_backend):
    found = await _search(sql_backend, CLASS_SEARCH, "mathematics", coaching_center_id="C1")
    assert _ids(found) == ["K1", "K3"]


@pytest.mark.asyncio
async def test_branch_search(sql_backend):
    found = await _search(sql_backend, BRANCH_SEARCH, "bright", coaching_center_id="C1")
    assert _ids(found) == ["B1", "B2"]

    (north,) = await _search(sql_backend, BRANCH_SEARCH, "campus", coaching_center_id="C1")
    assert north.id == "B1"
    assert north.auxiliary_badge == "Main branch"
    assert north.scope_label == "Bright Minds Academy"


@pytest.mark.asyncio
async def test_branch_search_skips_inactive(sql_backend):
    assert await _search(sql_backend, BRANCH_SEARCH, "lake", coaching_center_id="C2") == []


# ----------------------------------------------------------------------
# backend primitives
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_limit_caps_rows(sql_backend):
    rows = await sql_backend.select("student_enrollment_details", ("enrollment_id",), FilterSet(), limit=2)
    assert len(rows) == 2


@pytest.mark.asyncio
async def test_fetch_by_ids_dedupes_and_adds_id_column(sql_backend):
    rows = await sql_backend.fetch_by_ids("profiles", ("avatar_url",), "id", ["S1", "S1", None, "S4"])

    assert sorted(r["id"] for r in rows) == ["S1", "S4"]
    assert all("avatar_url" in r for r in rows)
    assert await sql_backend.fetch_by_ids("profiles", ("id",), "id", []) == []


@pytest.mark.asyncio
async def test_end_to_end_selector(sql_backend):
    picker = SearchSelect(CLASS_SEARCH, sql_backend, branch_id="B1", debounce_ms=5)

    picker.type("phys")
    await picker.wait_idle()

    assert picker.state == St.RESULTS_SHOWN
    assert [c.display_name for c in picker.candidates] == ["Physics Crash Course"]
