"""Workflow loader - parse and validate a YAML workflow document.

Validation order:
1. required top-level fields (name, description, initial_state, states)
2. initial_state is a declared state
3. every transition target is a declared state
4. every transition has a transition_reason, and instructions unless the
   target state has default_instructions to fall back on

Nothing is coerced or dropped: the first violation raises with the field named.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from phaseguide.domain.entities.workflow import (
    ReviewPerspective,
    StateDefinition,
    TransitionDefinition,
    WorkflowDefinition,
    WorkflowMetadata,
)
from phaseguide.domain.errors import (
    DanglingTransitionError,
    MalformedDocumentError,
    MissingFieldError,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "description", "initial_state", "states")


def _text(value: object) -> str | None:
    """Non-empty stripped string or None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_mapping(value: object, field: str, source: str | None) -> dict:
    if not isinstance(value, dict):
        raise MalformedDocumentError(f"{field} must be a mapping", field=field, source=source)
    return value


def load(document_text: str, source: str | None = None) -> WorkflowDefinition:
    """Parse workflow YAML into a WorkflowDefinition or raise a WorkflowLoadError."""
    try:
        raw = yaml.safe_load(document_text)
    except yaml.YAMLError as e:
        raise MalformedDocumentError(f"invalid YAML ({e})", source=source) from e
    doc = _require_mapping(raw, "document", source)

    for field in REQUIRED_FIELDS:
        if field == "states":
            if not doc.get("states"):
                raise MissingFieldError("states", field="states", source=source)
        elif _text(doc.get(field)) is None:
            raise MissingFieldError(field, field=field, source=source)

    states_raw = _require_mapping(doc["states"], "states", source)
    state_names = [str(k) for k in states_raw]
    initial_state = _text(doc["initial_state"])
    if initial_state not in state_names:
        raise DanglingTransitionError(
            f'initial_state "{initial_state}" is not declared in states',
            field="initial_state",
            source=source,
        )

    # Targets before reasons/instructions, across the whole document.
    for state_name, state_raw in states_raw.items():
        state_raw = _require_mapping(state_raw, f"states.{state_name}", source)
        transitions = state_raw.get("transitions") or []
        if not isinstance(transitions, list):
            raise MalformedDocumentError(
                "transitions must be a list",
                field=f"states.{state_name}.transitions",
                source=source,
            )
        for index, edge in enumerate(transitions):
            field = f"states.{state_name}.transitions[{index}]"
            edge = _require_mapping(edge, field, source)
            target = _text(edge.get("to"))
            if target is None:
                raise MissingFieldError(f"{field}.to", field=f"{field}.to", source=source)
            if target not in state_names:
                raise DanglingTransitionError(
                    f'state "{state_name}" has transition to unknown state "{target}"',
                    field=f"{field}.to",
                    source=source,
                )

    states: dict[str, StateDefinition] = {}
    for state_name, state_raw in states_raw.items():
        name = str(state_name)
        description = _text(state_raw.get("description"))
        if description is None:
            raise MissingFieldError(
                f"states.{name}.description", field=f"states.{name}.description", source=source
            )
        transitions = tuple(
            _build_transition(name, index, edge, states_raw, source)
            for index, edge in enumerate(state_raw.get("transitions") or [])
        )
        states[name] = StateDefinition(
            description=description,
            default_instructions=_text(state_raw.get("default_instructions")),
            transitions=transitions,
        )

    try:
        metadata = WorkflowMetadata(**_require_mapping(doc.get("metadata") or {}, "metadata", source))
        workflow = WorkflowDefinition(
            name=_text(doc["name"]),
            description=_text(doc["description"]),
            initial_state=initial_state,
            states=states,
            metadata=metadata,
        )
    except ValidationError as e:
        raise MalformedDocumentError(str(e), source=source) from e

    logger.debug(
        "Loaded workflow %s (%d states) from %s", workflow.name, len(states), source or "<text>"
    )
    return workflow


def _build_transition(
    state_name: str,
    index: int,
    edge: dict,
    states_raw: dict,
    source: str | None,
) -> TransitionDefinition:
    field = f"states.{state_name}.transitions[{index}]"
    target = _text(edge.get("to"))
    reason = _text(edge.get("transition_reason"))
    if reason is None:
        raise MissingFieldError(
            f"{field}.transition_reason ({state_name} -> {target})",
            field=f"{field}.transition_reason",
            source=source,
        )
    instructions = _text(edge.get("instructions"))
    if instructions is None and _text((states_raw.get(target) or {}).get("default_instructions")) is None:
        raise MissingFieldError(
            f"{field}.instructions ({state_name} -> {target}, and {target} has no default_instructions)",
            field=f"{field}.instructions",
            source=source,
        )

    perspectives_raw = edge.get("review_perspectives") or []
    if not isinstance(perspectives_raw, list):
        raise MalformedDocumentError(
            "review_perspectives must be a list",
            field=f"{field}.review_perspectives",
            source=source,
        )
    perspectives = []
    for item in perspectives_raw:
        item = _require_mapping(item, f"{field}.review_perspectives", source)
        perspective = _text(item.get("perspective"))
        if perspective is None:
            raise MissingFieldError(
                f"{field}.review_perspectives.perspective",
                field=f"{field}.review_perspectives",
                source=source,
            )
        perspectives.append(ReviewPerspective(perspective=perspective, prompt=_text(item.get("prompt")) or ""))

    return TransitionDefinition(
        trigger=_text(edge.get("trigger")) or f"{state_name}_to_{target}",
        to=target,
        transition_reason=reason,
        instructions=instructions,
        additional_instructions=_text(edge.get("additional_instructions")),
        review_perspectives=tuple(perspectives),
    )


def load_file(path: Path) -> WorkflowDefinition:
    """Read and load a workflow document from disk."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedDocumentError("not UTF-8 text", source=str(path)) from e
    return load(text, source=str(path))
