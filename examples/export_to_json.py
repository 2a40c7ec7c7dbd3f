""" Example: export a YAML workflow to plain JSON for storage. """
from agentflow.workflow.compiler import load_workflow_file
from agentflow.workflow.export import dump_workflow_json


def main():
    yaml_path = "examples/workflows/support_triage.yaml"
    out_json_path = "support_triage_workflow.json"
    dump_workflow_json(load_workflow_file(yaml_path), out_json_path)
    print(f"Wrote workflow JSON to: {out_json_path}")



if __name__ == '__main__':
    main()
