"""LangGraph query workflow - context → generate → validate → execute, with bounded recovery."""

import asyncio
from dataclasses import dataclass, field

from langgraph.graph import END, START, StateGraph

from sageql.domain.entities.query_state import WorkflowState
from sageql.domain.entities.workflow_events import WorkflowStep
from sageql.domain.ports.query import (
    QueryExecutorPort,
    QueryGeneratorPort,
    QueryValidatorPort,
    RetryPromptFormatter,
    SchemaIndexPort,
)
from sageql.infrastructure.agents.boundary import guarded
from sageql.infrastructure.agents.query_executor import execute_query_node
from sageql.infrastructure.agents.query_generator import generate_query_node
from sageql.infrastructure.agents.query_validator import validate_query_node
from sageql.infrastructure.agents.recovery import (
    handle_execution_error_node,
    handle_validation_error_node,
)
from sageql.infrastructure.agents.schema_context import DEFAULT_SEARCH_LIMIT, schema_context_node
from sageql.infrastructure.workflow.prompts import (
    execution_retry_prompt,
    validation_retry_prompt,
)
from sageql.infrastructure.workflow.routing import ROUTING_TABLE


@dataclass
class QueryCapabilities:
    """External collaborators the workflow calls."""

    generator: QueryGeneratorPort
    validator: QueryValidatorPort
    executor: QueryExecutorPort
    schema_index: SchemaIndexPort
    validation_formatter: RetryPromptFormatter = field(default=validation_retry_prompt)
    execution_formatter: RetryPromptFormatter = field(default=execution_retry_prompt)


def build_query_graph(
    capabilities: QueryCapabilities,
    *,
    search_limit: int = DEFAULT_SEARCH_LIMIT,
    cancel_event: asyncio.Event | None = None,
) -> StateGraph:
    """Build workflow graph with injected capabilities.

    Every node runs behind the same boundary: cancellation is checked before
    the node body and any exception becomes a validation_errors entry.
    """
    caps = capabilities

    async def context_wrapper(state: WorkflowState) -> WorkflowState:
        return await schema_context_node(state, caps.schema_index, search_limit)

    async def generate_wrapper(state: WorkflowState) -> WorkflowState:
        return await generate_query_node(state, caps.generator)

    async def validate_wrapper(state: WorkflowState) -> WorkflowState:
        return await validate_query_node(state, caps.validator)

    async def execute_wrapper(state: WorkflowState) -> WorkflowState:
        return await execute_query_node(state, caps.executor)

    async def validation_recovery_wrapper(state: WorkflowState) -> WorkflowState:
        return await handle_validation_error_node(state, caps.validation_formatter)

    async def execution_recovery_wrapper(state: WorkflowState) -> WorkflowState:
        return await handle_execution_error_node(state, caps.execution_formatter)

    nodes = {
        WorkflowStep.CONTEXT: context_wrapper,
        WorkflowStep.GENERATE: generate_wrapper,
        WorkflowStep.VALIDATE: validate_wrapper,
        WorkflowStep.EXECUTE: execute_wrapper,
        WorkflowStep.VALIDATION_RECOVER: validation_recovery_wrapper,
        WorkflowStep.EXECUTION_RECOVER: execution_recovery_wrapper,
    }

    builder = StateGraph(WorkflowState)
    for step, node in nodes.items():
        builder.add_node(step.value, guarded(step, node, cancel_event))

    builder.add_edge(START, WorkflowStep.CONTEXT.value)
    for step, (router, targets) in ROUTING_TABLE.items():
        builder.add_conditional_edges(
            step.value,
            router,
            path_map={tag: (END if target is None else target.value) for tag, target in targets.items()},
        )

    return builder


def compile_query_graph(builder: StateGraph):
    """Compile without a checkpointer: no state outlives a run."""
    return builder.compile()
