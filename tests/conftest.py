"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from graphql import build_schema, introspection_from_schema

from sageql.domain.ports.query import GeneratedQuery, GraphQLResponse

BLOG_SDL = '''
"""A registered user"""
type User {
  id: ID!
  name: String!
  email: String
  posts(first: Int): [Post!]!
}

"""A blog post written by a user"""
type Post {
  id: ID!
  title: String!
  body: String
  author: User!
  comments: [Comment!]!
}

type Comment {
  id: ID!
  text: String!
  author: User!
}

type Query {
  user(id: ID!): User
  users(limit: Int): [User!]!
  post(id: ID!): Post
  posts: [Post!]!
}
'''

VALID_QUERY = "{ users(limit: 5) { id name } }"


@pytest.fixture
def raw_schema() -> dict:
    """Introspection result (``{"__schema": ...}``) of a small blog API."""
    return introspection_from_schema(build_schema(BLOG_SDL))


@pytest.fixture
def mock_generator():
    """Generator that always returns VALID_QUERY."""
    generator = MagicMock()
    generator.generate = AsyncMock(return_value=GeneratedQuery(query=VALID_QUERY, errors=[]))
    return generator


@pytest.fixture
def mock_validator():
    """Validator that always passes."""
    validator = MagicMock()
    validator.validate = AsyncMock(return_value=[])
    return validator


@pytest.fixture
def mock_executor():
    """Executor that always succeeds."""
    executor = MagicMock()
    executor.execute = AsyncMock(
        return_value=GraphQLResponse(data={"users": [{"id": "1", "name": "Ada"}]})
    )
    return executor
