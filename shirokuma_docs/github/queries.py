"""GraphQL documents used by the issues, projects and discussions commands."""

_ITEM_FIELDS = """
status: fieldValueByName(name: "Status") {
  ... on ProjectV2ItemFieldSingleSelectValue { name %(extra)s }
}
priority: fieldValueByName(name: "Priority") {
  ... on ProjectV2ItemFieldSingleSelectValue { name %(extra)s }
}
type: fieldValueByName(name: "Type") {
  ... on ProjectV2ItemFieldSingleSelectValue { name %(extra)s }
}
itemType: fieldValueByName(name: "Item Type") {
  ... on ProjectV2ItemFieldSingleSelectValue { name %(extra)s }
}
size: fieldValueByName(name: "Size") {
  ... on ProjectV2ItemFieldSingleSelectValue { name %(extra)s }
}
"""

ITEM_FIELDS = _ITEM_FIELDS % {"extra": ""}
ITEM_FIELDS_WITH_IDS = _ITEM_FIELDS % {"extra": "optionId"}

# --- Repository / issues ---

QUERY_REPO_ID = """
query($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) { id }
}
"""

QUERY_LABELS = """
query($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    labels(first: 50) { nodes { id name } }
  }
}
"""

QUERY_ISSUES = (
    """
query($owner: String!, $name: String!, $first: Int!, $cursor: String) {
  repository(owner: $owner, name: $name) {
    issues(first: $first, after: $cursor, orderBy: {field: CREATED_AT, direction: DESC}) {
      pageInfo { hasNextPage endCursor }
      nodes {
        number
        title
        url
        state
        createdAt
        updatedAt
        labels(first: 10) { nodes { name } }
        projectItems(first: 5) {
          nodes {
            id
            project { title }
"""
    + ITEM_FIELDS
    + """
          }
        }
      }
    }
  }
}
"""
)

QUERY_ISSUE_DETAIL = (
    """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      id
      number
      title
      body
      url
      state
      createdAt
      updatedAt
      labels(first: 20) { nodes { name } }
      projectItems(first: 5) {
        nodes {
          id
          project { id title }
"""
    + ITEM_FIELDS_WITH_IDS
    + """
        }
      }
    }
  }
}
"""
)

QUERY_ISSUE_ID = """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) { id number title url }
  }
}
"""

MUTATION_CREATE_ISSUE = """
mutation($repositoryId: ID!, $title: String!, $body: String, $labelIds: [ID!]) {
  createIssue(input: {repositoryId: $repositoryId, title: $title, body: $body, labelIds: $labelIds}) {
    issue { id number url title }
  }
}
"""

MUTATION_UPDATE_ISSUE = """
mutation($id: ID!, $title: String, $body: String) {
  updateIssue(input: {id: $id, title: $title, body: $body}) {
    issue { id number title body url }
  }
}
"""

MUTATION_ADD_COMMENT = """
mutation($subjectId: ID!, $body: String!) {
  addComment(input: {subjectId: $subjectId, body: $body}) {
    commentEdge { node { id databaseId url } }
  }
}
"""

MUTATION_CLOSE_ISSUE = """
mutation($issueId: ID!, $stateReason: IssueClosedStateReason) {
  closeIssue(input: {issueId: $issueId, stateReason: $stateReason}) {
    issue { id number state }
  }
}
"""

MUTATION_REOPEN_ISSUE = """
mutation($issueId: ID!) {
  reopenIssue(input: {issueId: $issueId}) {
    issue { id number state }
  }
}
"""

# --- Projects V2 ---

QUERY_ORG_PROJECTS = """
query($login: String!, $first: Int!) {
  organization(login: $login) {
    projectsV2(first: $first) { nodes { id title } }
  }
}
"""

QUERY_USER_PROJECTS = """
query($login: String!, $first: Int!) {
  user(login: $login) {
    projectsV2(first: $first) { nodes { id title } }
  }
}
"""

QUERY_PROJECT_FIELDS = """
query($projectId: ID!) {
  node(id: $projectId) {
    ... on ProjectV2 {
      title
      fields(first: 30) {
        nodes {
          ... on ProjectV2SingleSelectField { id name dataType options { id name } }
          ... on ProjectV2Field { id name dataType }
        }
      }
    }
  }
}
"""

QUERY_PROJECT_ITEMS = (
    """
query($projectId: ID!, $cursor: String) {
  node(id: $projectId) {
    ... on ProjectV2 {
      title
      items(first: 100, after: $cursor) {
        pageInfo { hasNextPage endCursor }
        nodes {
          id
"""
    + ITEM_FIELDS
    + """
          content {
            ... on DraftIssue { title }
            ... on Issue { title number }
          }
        }
      }
    }
  }
}
"""
)

QUERY_PROJECT_ITEM = (
    """
query($itemId: ID!) {
  node(id: $itemId) {
    ... on ProjectV2Item {
      id
"""
    + ITEM_FIELDS_WITH_IDS
    + """
      content {
        ... on DraftIssue { id title body }
        ... on Issue { id title number body url }
      }
      project { id title }
    }
  }
}
"""
)

MUTATION_UPDATE_SELECT_FIELD = """
mutation($projectId: ID!, $itemId: ID!, $fieldId: ID!, $optionId: String!) {
  updateProjectV2ItemFieldValue(input: {
    projectId: $projectId
    itemId: $itemId
    fieldId: $fieldId
    value: { singleSelectOptionId: $optionId }
  }) { projectV2Item { id } }
}
"""

MUTATION_UPDATE_TEXT_FIELD = """
mutation($projectId: ID!, $itemId: ID!, $fieldId: ID!, $text: String!) {
  updateProjectV2ItemFieldValue(input: {
    projectId: $projectId
    itemId: $itemId
    fieldId: $fieldId
    value: { text: $text }
  }) { projectV2Item { id } }
}
"""

MUTATION_ADD_TO_PROJECT = """
mutation($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(input: {projectId: $projectId, contentId: $contentId}) {
    item { id }
  }
}
"""

# --- Discussions ---

_DISCUSSION_FIELDS = """
id
number
title
url
createdAt
updatedAt
answerChosenAt
author { login }
category { name }
"""

QUERY_DISCUSSION_CATEGORIES = """
query($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    id
    discussionCategories(first: 20) {
      nodes { id name description emoji isAnswerable }
    }
  }
}
"""

QUERY_DISCUSSIONS = (
    """
query($owner: String!, $name: String!, $first: Int!, $categoryId: ID, $cursor: String) {
  repository(owner: $owner, name: $name) {
    discussions(first: $first, after: $cursor, categoryId: $categoryId, orderBy: {field: CREATED_AT, direction: DESC}) {
      pageInfo { hasNextPage endCursor }
      nodes {
"""
    + _DISCUSSION_FIELDS
    + """
      }
    }
  }
}
"""
)

QUERY_DISCUSSION = (
    """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    discussion(number: $number) {
      body
"""
    + _DISCUSSION_FIELDS
    + """
    }
  }
}
"""
)

QUERY_DISCUSSION_BY_ID = (
    """
query($id: ID!) {
  node(id: $id) {
    ... on Discussion {
      body
"""
    + _DISCUSSION_FIELDS
    + """
    }
  }
}
"""
)

MUTATION_CREATE_DISCUSSION = """
mutation($repositoryId: ID!, $categoryId: ID!, $title: String!, $body: String!) {
  createDiscussion(input: {repositoryId: $repositoryId, categoryId: $categoryId, title: $title, body: $body}) {
    discussion { id number url title }
  }
}
"""

MUTATION_UPDATE_DISCUSSION = """
mutation($discussionId: ID!, $title: String, $body: String) {
  updateDiscussion(input: {discussionId: $discussionId, title: $title, body: $body}) {
    discussion { id number url title body }
  }
}
"""

MUTATION_ADD_DISCUSSION_COMMENT = """
mutation($discussionId: ID!, $body: String!) {
  addDiscussionComment(input: {discussionId: $discussionId, body: $body}) {
    comment { id url }
  }
}
"""

QUERY_SEARCH_DISCUSSIONS = (
    """
query($searchQuery: String!, $first: Int!) {
  search(query: $searchQuery, type: DISCUSSION, first: $first) {
    discussionCount
    nodes {
      ... on Discussion {
"""
    + _DISCUSSION_FIELDS
    + """
      }
    }
  }
}
"""
)
