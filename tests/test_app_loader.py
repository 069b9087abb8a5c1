import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from remoting_swagger.parser.app import load_app, load_document

FIXTURES = Path(__file__).parent / "fixtures"


class TestLoadDocument:
    def test_yaml(self):
        assert load_document(FIXTURES / "products.yaml")["name"] == "product-catalog"

    def test_json(self, tmp_path):
        f = tmp_path / "app.json"
        f.write_text(json.dumps({"name": "x", "models": []}))
        assert load_document(f) == {"name": "x", "models": []}

    def test_file_read_once(self, tmp_path, monkeypatch):
        f = tmp_path / "app.json"
        f.write_text(json.dumps({"name": "x"}))
        reads = []
        original = Path.read_text

        def counting_read_text(self, *args, **kwargs):
            reads.append(self)
            return original(self, *args, **kwargs)

        monkeypatch.setattr(Path, "read_text", counting_read_text)
        load_document(f)
        assert reads == [f]


class TestLoadApp:
    def test_products(self):
        app = load_app(FIXTURES / "products.yaml")
        assert app.name == "product-catalog"
        assert app.version == "2.1.0"
        assert [m.name for m in app.models] == ["Product", "Image", "ValidationError"]
        assert app.get_model("Image").public is False
        assert [r.method for r in app.routes] == ["Product.setImage", "Product.multipath", "Product.multipath"]

    def test_error_codes_are_strings(self):
        app = load_app(FIXTURES / "products.yaml")
        assert app.routes[0].errors[0].code == "422"

    def test_swagger_block(self):
        app = load_app(FIXTURES / "conversations.yaml")
        assert app.swagger == {"generateRelationProperties": True}

    def test_json_app(self, tmp_path):
        f = tmp_path / "app.json"
        f.write_text(json.dumps({"name": "json-app", "models": [{"name": "Note", "properties": {"text": "string"}}]}))
        app = load_app(f)
        assert app.models[0].name == "Note"

    def test_non_mapping_rejected(self, tmp_path):
        f = tmp_path / "app.yaml"
        f.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_document(f)

    def test_invalid_model_rejected(self, tmp_path):
        f = tmp_path / "app.yaml"
        f.write_text("models:\n  - properties: {}\n")
        with pytest.raises(ValidationError):
            load_app(f)
