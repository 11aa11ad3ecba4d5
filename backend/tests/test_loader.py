import json

import numpy as np
import pytest

from config import MIN_STROKE_POINTS, TEMPLATES_DIR
from models.loader import load_all_templates, load_template
from models.registry import Template, TemplateError, TemplateRegistry


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _square():
    return [{"x": 0.1, "y": 0.1}, {"x": 0.9, "y": 0.1}, {"x": 0.9, "y": 0.9}, {"x": 0.1, "y": 0.9}]


def test_bundled_shapes_load():
    registry = load_all_templates(TEMPLATES_DIR)
    assert registry.names() == ["Diamond", "Heart", "Home", "Triangle"]
    for name in registry.names():
        template = registry.get(name)
        assert template.points.shape[1] == 2
        assert len(template.points) >= MIN_STROKE_POINTS
        assert np.all((template.points >= 0) & (template.points <= 1))


def test_object_form(tmp_path):
    template = load_template(_write(tmp_path / "box.json", {"name": "Box", "points": _square()}))
    assert template.name == "Box"
    assert template.points.shape == (4, 2)


def test_list_form_takes_name_from_file(tmp_path):
    template = load_template(_write(tmp_path / "open_square.json", _square()))
    assert template.name == "Open Square"


def test_points_are_read_only(tmp_path):
    template = load_template(_write(tmp_path / "box.json", _square()))
    with pytest.raises(ValueError):
        template.points[0, 0] = 5.0


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "NoPoints"},
        {"name": "Few", "points": [{"x": 0.1, "y": 0.2}]},
        {"name": "Flat", "points": [{"x": 0.1, "y": 0.5}, {"x": 0.5, "y": 0.5}, {"x": 0.9, "y": 0.5}]},
        {"name": "Dot", "points": [{"x": 0.3, "y": 0.3}, {"x": 0.3, "y": 0.3}]},
        {"name": "Broken", "points": [{"x": 0.1}, {"x": 0.5, "y": 0.5}]},
        {"name": "Words", "points": [{"x": "left", "y": 0.1}, {"x": 0.5, "y": 0.5}]},
        "just a string",
    ],
)
def test_malformed_templates_are_fatal(tmp_path, payload):
    with pytest.raises(TemplateError):
        load_template(_write(tmp_path / "bad.json", payload))


def test_unparseable_json_is_fatal(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(TemplateError):
        load_template(path)


def test_empty_directory_is_fatal(tmp_path):
    with pytest.raises(TemplateError):
        load_all_templates(tmp_path)


def test_non_finite_points_are_rejected():
    with pytest.raises(TemplateError):
        Template.from_points("Inf", [(0.0, 0.0), (float("inf"), 1.0)])


def test_registry_falls_back_to_default():
    heart = Template.from_points("Heart", [(0.0, 0.0), (1.0, 1.0)])
    star = Template.from_points("Star", [(0.0, 1.0), (1.0, 0.0)])
    registry = TemplateRegistry(default_name="Heart")
    registry.add(star)
    registry.add(heart)
    assert registry.get("Star") is star
    assert registry.get(None) is heart
    assert registry.get("Unknown") is heart
    assert registry.random_name() in {"Heart", "Star"}


def test_registry_without_default_uses_first_name():
    star = Template.from_points("Star", [(0.0, 1.0), (1.0, 0.0)])
    registry = TemplateRegistry(default_name="Heart")
    registry.add(star)
    assert registry.get(None) is star
