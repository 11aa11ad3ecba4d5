import json
import logging
from pathlib import Path

from config import TEMPLATES_DIR
from models.registry import Template, TemplateError, TemplateRegistry

logger = logging.getLogger("uvicorn.error")


def load_template(path: Path) -> Template:
    """Load one shape file: {"name": ..., "points": [{"x": .., "y": ..}, ...]}."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise TemplateError(f"Could not read template {path}: {e}") from e

    if isinstance(data, list):
        name, raw_points = Path(path).stem.replace("_", " ").title(), data
    elif isinstance(data, dict):
        name, raw_points = data.get("name") or Path(path).stem.title(), data.get("points")
    else:
        raise TemplateError(f"Template {path} must be an object or a list of points")

    if not isinstance(raw_points, list):
        raise TemplateError(f"Template {path} has no point list")

    try:
        points = [(float(p["x"]), float(p["y"])) for p in raw_points]
    except (KeyError, TypeError, ValueError) as e:
        raise TemplateError(f"Template {path} has a malformed point: {e}") from e

    return Template.from_points(name, points)


def load_all_templates(templates_dir: Path = TEMPLATES_DIR) -> TemplateRegistry:
    registry = TemplateRegistry()

    for path in sorted(Path(templates_dir).glob("*.json")):
        template = load_template(path)
        registry.add(template)
        print(f"Loaded template: {template.name} ({len(template.points)} points)")

    if not registry.templates:
        raise TemplateError(f"No templates found in {templates_dir}")

    logger.info(f"[Templates] {len(registry.templates)} shapes: {', '.join(registry.names())}")
    return registry
