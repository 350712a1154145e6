"""Graph workflow definition."""

from pydantic_graph import Graph

from linearity.core.config import State
from linearity.core.log import logger
from linearity.core.result import RunOutcome


def create_workflow():
    """Create the update/merge workflow graph.

    Inspect -> PlanUpdate -> Execute -> [Inspect again | End]
    Inspect -> PlanMerge -> Execute -> Cleanup -> End

    Returns:
        Graph workflow with State as state_type
    """
    logger.debug("Building workflow graph")

    # Imported here so the graph can resolve the nodes' return hints
    from linearity.workflow.nodes.cleanup import Cleanup
    from linearity.workflow.nodes.execute import Execute
    from linearity.workflow.nodes.inspect import Inspect
    from linearity.workflow.nodes.plan_merge import PlanMerge
    from linearity.workflow.nodes.plan_update import PlanUpdate

    return Graph(
        nodes=(Inspect, PlanUpdate, PlanMerge, Execute, Cleanup),
        state_type=State,
        run_end_type=RunOutcome,
    )


async def run_workflow(state: State) -> RunOutcome:
    """Run the workflow from inspection to its end node."""
    from linearity.workflow.nodes.inspect import Inspect

    workflow = create_workflow()
    result = await workflow.run(Inspect(), state=state)
    return result.output
