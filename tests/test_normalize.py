from taskboard.normalize import (
    envelope_message,
    extract_data,
    extract_entity,
    extract_pagination,
    normalize_collection,
)


def test_nested_under_domain_key():
    env = {"success": True, "data": {"projects": [{"_id": "p1"}], "pagination": {}}}
    assert normalize_collection(env, "projects") == [{"_id": "p1"}]


def test_generic_items_under_data():
    env = {"success": True, "data": {"items": [{"_id": "t1"}]}}
    assert normalize_collection(env, "tasks") == [{"_id": "t1"}]


def test_top_level_items():
    env = {"success": True, "items": [{"_id": "t1"}, {"_id": "t2"}]}
    assert normalize_collection(env, "tasks") == [{"_id": "t1"}, {"_id": "t2"}]


def test_absent_list_is_empty():
    assert normalize_collection({"success": True, "data": {}}, "tasks") == []
    assert normalize_collection({"success": True}) == []


def test_malformed_data_is_empty():
    assert normalize_collection({"success": True, "data": "oops"}, "tasks") == []
    assert normalize_collection({"success": True, "data": {"tasks": "oops"}}, "tasks") == []


def test_non_mapping_inputs():
    assert normalize_collection(None) == []
    assert normalize_collection("oops") == []
    assert normalize_collection(42, "tasks") == []


def test_failed_envelope_is_empty():
    env = {"success": False, "data": {"tasks": [{"_id": "t1"}]}}
    assert normalize_collection(env, "tasks") == []


def test_domain_key_wins_over_items():
    env = {"data": {"tasks": [{"_id": "a"}], "items": [{"_id": "b"}]}, "items": [{"_id": "c"}]}
    assert normalize_collection(env, "tasks") == [{"_id": "a"}]


def test_normalizing_a_list_is_idempotent():
    env = {"success": True, "data": {"tasks": [{"_id": "t1"}]}}
    once = normalize_collection(env, "tasks")
    assert normalize_collection(once, "tasks") is once
    assert normalize_collection(normalize_collection(once)) == once


def test_extract_entity():
    assert extract_entity({"success": True, "data": {"task": {"_id": "t1"}}}, "task") == {"_id": "t1"}
    assert extract_entity({"success": True, "data": {"_id": "t1"}}, "task") == {"_id": "t1"}
    assert extract_entity({"success": True, "data": {}}, "task") is None
    assert extract_entity({"success": False, "data": {"task": {"_id": "t1"}}}, "task") is None


def test_extract_data():
    assert extract_data({"success": True, "data": {"overview": {}}}) == {"overview": {}}
    assert extract_data({"success": True, "data": []}) is None


def test_extract_pagination():
    env = {"data": {"pagination": {"currentPage": 2, "totalPages": 5, "totalTasks": 42, "limit": 10}}}
    page = extract_pagination(env)
    assert page.current_page == 2
    assert page.total_pages == 5
    assert page.total == 42


def test_envelope_message():
    assert envelope_message({"message": "Invalid credentials"}) == "Invalid credentials"
    assert envelope_message({"error": "Boom"}) == "Boom"
    assert envelope_message({"errors": ["Title is required", "x"]}) == "Title is required"
    assert envelope_message(None, default="fallback") == "fallback"
