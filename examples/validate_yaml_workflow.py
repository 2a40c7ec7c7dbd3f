""" Example: load a YAML workflow, validate it and route a few sample tickets. """
from agentflow.workflow.compiler import load_workflow_file
from agentflow.workflow.conditions import condition_to_string
from agentflow.workflow.guards import branch_outcome
from agentflow.workflow.models import NodeRole
from agentflow.workflow.validator import validate_workflow


def main():
    workflow = load_workflow_file("examples/workflows/support_triage.yaml")
    result = validate_workflow(workflow.nodes, workflow.edges, require_branch_outcomes=True)

    print(f"Workflow: {workflow.name}")
    print(f"  valid: {result.is_valid}")
    for error in result.errors:
        print(f"  - {error}")

    branch = next(n for n in workflow.nodes if n.role == NodeRole.BRANCH)
    print(f"\nCondition: {condition_to_string(branch.condition)}")

    for ticket in ({"score": 91, "lang": "en"}, {"score": 91, "lang": "de"}, {"score": 12, "lang": "en"}):
        print(f"  {ticket} -> {branch_outcome(branch.condition, ticket)}")


if __name__ == '__main__':
    main()
