"""Shared test fixtures."""

import json

import pytest
from httpx import ASGITransport, AsyncClient

from dsgs.constraint.template_store import TemplateStore
from dsgs.mcp.dispatcher import Dispatcher
from dsgs.mcp.http_server import create_app
from dsgs.models.tcc import create_tcc
from dsgs.specification.manager import SpecificationManager


def make_template(template_id: str, category: str, applicable: list[str], severity: str = "ERROR") -> dict:
    return {
        "id": template_id,
        "name": f"{template_id} name",
        "category": category,
        "description": f"{template_id} description",
        "rule": f"rule.{template_id}",
        "applicableTasks": applicable,
        "severity": severity,
    }


def write_json(path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def template_dir(tmp_path):
    """Three partitions with a small, known set of templates."""
    root = tmp_path / "templates"
    write_json(root / "security" / "a-sec-001.json", make_template("SEC-001", "SECURITY", ["API", "AUTHENTICATION"]))
    write_json(root / "security" / "b-sec-003.json", make_template("SEC-003", "SECURITY", ["FINANCIAL"]))
    write_json(root / "performance" / "perf-001.json", make_template("PERF-001", "PERFORMANCE", ["API"], "WARNING"))
    write_json(root / "architecture" / "arch-001.json", make_template("ARCH-001", "ARCHITECTURE", ["ALL"], "WARNING"))
    return root


@pytest.fixture
def template_store(template_dir):
    return TemplateStore(template_dir)


@pytest.fixture
def spec_manager():
    return SpecificationManager()


@pytest.fixture
def global_spec_path(tmp_path):
    path = tmp_path / "global-spec.json"
    write_json(path, {
        "version": "1.0",
        "metadata": {"taskConstraints": {"FINANCIAL": ["SEC-003", "AUDIT-009"]}},
    })
    return path


@pytest.fixture
def spec_path(tmp_path):
    path = tmp_path / "s.json"
    write_json(path, {"version": "1.0", "name": "project spec"})
    return path


@pytest.fixture
def tcc_path(tmp_path):
    """An OTHER-type TCC: one wildcard template plus one context constraint."""
    tcc = create_tcc("task-1", "Add pagination", "OTHER")
    tcc.context.relevant_constraints = ["CUSTOM-1"]
    path = tmp_path / "t.json"
    write_json(path, tcc.to_document())
    return path


@pytest.fixture
def dispatcher(template_store, spec_manager):
    return Dispatcher(spec_manager=spec_manager, template_store=template_store)


@pytest.fixture
def app(dispatcher):
    return create_app(dispatcher)


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def add_template(template_dir):
    """Write an extra template file into the fixture template tree."""

    def _add(partition: str, filename: str, template_id: str, category: str, applicable: list[str]):
        write_json(template_dir / partition / filename, make_template(template_id, category, applicable))

    return _add
