"""
Tests for Projects V2 helpers.
"""

import pytest

from shirokuma_docs.github import queries
from shirokuma_docs.github.client import GitHubError
from shirokuma_docs.github.projects import (
    ProjectField,
    add_item_to_project,
    fetch_items,
    get_item,
    get_project_fields,
    get_project_id,
    item_field_values,
    resolve_field_name,
    set_item_fields,
    update_select_field,
)
from shirokuma_docs.github.validation import InputValidationError

STATUS = ProjectField("F1", "Status", "SINGLE_SELECT", {"Todo": "o1", "Done": "o2"})
NOTES = ProjectField("F2", "Notes", "TEXT")


def _projects(*nodes, owner="organization"):
    return {owner: {"projectsV2": {"nodes": list(nodes)}}}


def test_get_project_id_prefers_matching_title(fake_client):
    fake_client.on_graphql(
        queries.QUERY_ORG_PROJECTS,
        _projects({"id": "P1", "title": "roadmap"}, {"id": "P2", "title": "docs"}),
    )
    assert get_project_id(fake_client, "octo", "docs") == "P2"


def test_get_project_id_falls_back_to_first(fake_client):
    fake_client.on_graphql(queries.QUERY_ORG_PROJECTS, _projects({"id": "P1", "title": "roadmap"}))
    assert get_project_id(fake_client, "octo", "docs") == "P1"


def test_get_project_id_user_projects(fake_client):
    fake_client.on_graphql(queries.QUERY_ORG_PROJECTS, GitHubError("not an org"))
    fake_client.on_graphql(
        queries.QUERY_USER_PROJECTS, _projects({"id": "U1", "title": "docs"}, owner="user")
    )
    assert get_project_id(fake_client, "octocat", "docs") == "U1"


def test_get_project_id_none(fake_client):
    fake_client.on_graphql(queries.QUERY_ORG_PROJECTS, {"organization": None})
    fake_client.on_graphql(queries.QUERY_USER_PROJECTS, {"user": None})
    assert get_project_id(fake_client, "ghost", "docs") is None


def test_get_project_fields(fake_client):
    fake_client.on_graphql(
        queries.QUERY_PROJECT_FIELDS,
        {
            "node": {
                "fields": {
                    "nodes": [
                        {
                            "id": "F1",
                            "name": "Status",
                            "dataType": "SINGLE_SELECT",
                            "options": [{"id": "o1", "name": "Todo"}],
                        },
                        {"id": "F2", "name": "Notes", "dataType": "TEXT"},
                        {"id": "F3", "name": "Due", "dataType": "DATE"},
                        {},
                    ]
                }
            }
        },
    )
    fields = get_project_fields(fake_client, "P1")
    assert list(fields) == ["Status", "Notes"]
    assert fields["Status"].options == {"Todo": "o1"}
    assert fields["Notes"].to_dict() == {"id": "F2", "name": "Notes", "type": "TEXT", "options": {}}


def test_resolve_field_name():
    assert resolve_field_name("Status", {"Status": 1}) == "Status"
    assert resolve_field_name("Type", {"Item Type": 1}) == "Item Type"
    assert resolve_field_name("Type", {"ItemType": 1}) == "ItemType"
    assert resolve_field_name("Size", {"Status": 1}) is None


def test_item_field_values_falls_back_to_item_type():
    node = {
        "status": {"name": "Todo", "optionId": "o1"},
        "priority": None,
        "type": None,
        "itemType": {"name": "Bug", "optionId": "t1"},
    }
    assert item_field_values(node) == {
        "status": "Todo",
        "priority": None,
        "type": "Bug",
        "size": None,
    }
    assert item_field_values(node, with_ids=True)["type_option_id"] == "t1"


def test_fetch_items_pages(fake_client):
    def page(item_id, number, has_next):
        return {
            "node": {
                "items": {
                    "nodes": [
                        {
                            "id": item_id,
                            "content": {"title": f"Issue {number}", "number": number},
                            "status": {"name": "Todo"},
                        }
                    ],
                    "pageInfo": {"hasNextPage": has_next, "endCursor": f"c{number}"},
                }
            }
        }

    fake_client.on_graphql(queries.QUERY_PROJECT_ITEMS, page("I1", 1, True), page("I2", 2, False))
    items = fetch_items(fake_client, "P1")

    assert [(i["id"], i["issue_number"], i["status"]) for i in items] == [
        ("I1", 1, "Todo"),
        ("I2", 2, "Todo"),
    ]
    cursors = [v["cursor"] for v in fake_client.variables_for(queries.QUERY_PROJECT_ITEMS)]
    assert cursors == [None, "c1"]


def test_get_item(fake_client):
    fake_client.on_graphql(
        queries.QUERY_PROJECT_ITEM,
        {
            "node": {
                "id": "I1",
                "content": {"id": "C1", "title": "T", "body": "B", "url": "u", "number": 3},
                "project": {"id": "P1", "title": "docs"},
                "status": {"name": "Done", "optionId": "o2"},
            }
        },
    )
    item = get_item(fake_client, "I1")
    assert item["issue_number"] == 3
    assert item["project_title"] == "docs"
    assert item["status"] == "Done"
    assert item["status_option_id"] == "o2"


def test_get_item_missing(fake_client):
    fake_client.on_graphql(queries.QUERY_PROJECT_ITEM, {"node": None})
    assert get_item(fake_client, "nope") is None


def test_add_item_to_project(fake_client):
    fake_client.on_graphql(
        queries.MUTATION_ADD_TO_PROJECT, {"addProjectV2ItemById": {"item": {"id": "I9"}}}
    )
    assert add_item_to_project(fake_client, "P1", "C1") == "I9"


def test_update_select_field_case_insensitive(fake_client):
    fake_client.on_graphql(queries.MUTATION_UPDATE_SELECT_FIELD, {})
    update_select_field(fake_client, "P1", "I1", STATUS, "done")
    assert fake_client.variables_for(queries.MUTATION_UPDATE_SELECT_FIELD) == [
        {"projectId": "P1", "itemId": "I1", "fieldId": "F1", "optionId": "o2"}
    ]


def test_update_select_field_unknown_option(fake_client):
    with pytest.raises(InputValidationError, match="Invalid value 'Blocked' for Status. Available: Todo, Done"):
        update_select_field(fake_client, "P1", "I1", STATUS, "Blocked")
    assert fake_client.calls == []


def test_set_item_fields(fake_client):
    fake_client.on_graphql(queries.MUTATION_UPDATE_SELECT_FIELD, {})
    fake_client.on_graphql(queries.MUTATION_UPDATE_TEXT_FIELD, {})
    fields = {"Status": STATUS, "Notes": NOTES}

    applied = set_item_fields(
        fake_client,
        "P1",
        "I1",
        fields,
        {"Status": "Todo", "Notes": "hello", "Priority": "High", "Size": None},
    )

    assert applied == {"Status": "Todo", "Notes": "hello"}
    assert fake_client.variables_for(queries.MUTATION_UPDATE_TEXT_FIELD)[0]["text"] == "hello"
