"""Generate JSON schemas from Pydantic models and save to schemas/ directory."""

import json
from pathlib import Path

from semcheck.contracts import CompatibilityReport
from semcheck.kernel.tree import APIItem


def generate_schemas():
    """Generate JSON schemas for the API tree input and the report output."""
    schemas_dir = Path(__file__).parent.parent / "schemas"
    schemas_dir.mkdir(exist_ok=True)

    for name, model in (("api_tree", APIItem), ("compatibility_report", CompatibilityReport)):
        schema_path = schemas_dir / f"{name}.schema.json"
        with open(schema_path, 'w', encoding='utf-8') as f:
            json.dump(model.model_json_schema(), f, indent=2, ensure_ascii=False)
        print(f"Generated: {schema_path}")

    print("\nSchema generation complete!")


if __name__ == "__main__":
    generate_schemas()
