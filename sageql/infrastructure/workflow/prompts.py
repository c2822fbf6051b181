"""Prompt builders for query generation and retry guidance."""

import json

from sageql.domain.entities.schema_context import SchemaContextResult

GENERATE_SYSTEM = (
    "You are a GraphQL expert. Write one GraphQL operation that answers the user's request "
    "using only the types and fields listed in the schema context. "
    "Output only the query inside a ```graphql fenced block. No explanations."
)

VALIDATION_RETRY_TEMPLATE = """The previous GraphQL query failed validation.

Validation errors:
{validation_context}

Failed query:
```graphql
{failed_query}
```

Schema context:
{schema_context}

Rewrite the query so that it fixes every error above. Use only fields that exist in the schema context."""

EXECUTION_RETRY_TEMPLATE = """The previous GraphQL query was valid but failed when executed.

Error message:
{error_message}

Failed query:
```graphql
{failed_query}
```

Schema context:
{schema_context}

Rewrite the query to avoid this error (check required arguments, nullability and field names)."""


def render_schema_context(schema_context: SchemaContextResult | None) -> str:
    """Pretty JSON of the context; "{}" when no lookup has succeeded yet."""
    if schema_context is None:
        return "{}"
    return json.dumps(schema_context.model_dump(mode="json"), indent=2, sort_keys=True)


def format_validation_errors(errors: list[str]) -> str:
    """Numbered list, one error per line."""
    if not errors:
        return "(no details reported)"
    return "\n".join(f"{i}. {error}" for i, error in enumerate(errors, start=1))


def validation_retry_prompt(
    errors: list[str],
    failed_query: str,
    schema_context: SchemaContextResult | None,
) -> str:
    return VALIDATION_RETRY_TEMPLATE.format(
        validation_context=format_validation_errors(errors),
        failed_query=failed_query or "",
        schema_context=render_schema_context(schema_context),
    )


def execution_retry_prompt(
    errors: list[str],
    failed_query: str,
    schema_context: SchemaContextResult | None,
) -> str:
    return EXECUTION_RETRY_TEMPLATE.format(
        error_message=errors[0] if errors else "Unknown execution error",
        failed_query=failed_query or "",
        schema_context=render_schema_context(schema_context),
    )


def build_generation_prompt(
    intent: str,
    root_types: dict[str, str],
    schema_context: SchemaContextResult | None,
) -> str:
    """User prompt for the generation step."""
    roots = ", ".join(f"{kind}: {name}" for kind, name in sorted(root_types.items())) or "query: Query"
    return f"""Request:
{intent}

Root operation types: {roots}

Schema context:
{render_schema_context(schema_context)}

Write the GraphQL query."""
