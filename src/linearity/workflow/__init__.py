"""Update and merge workflows as a pydantic-graph state machine."""
