"""Query workflow graph - LangGraph."""

from sageql.infrastructure.workflow.graph import (
    QueryCapabilities,
    build_query_graph,
    compile_query_graph,
)

__all__ = ["QueryCapabilities", "build_query_graph", "compile_query_graph"]
