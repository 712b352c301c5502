"""Tests for jsonrender.rendering.batch."""

from __future__ import annotations

import json
from pathlib import Path, PurePosixPath

import pytest

from jsonrender.core.models import EngineOptions, FileSet, RenderConfig
from jsonrender.core.results import BatchError, ErrorKind, FileOutcome
from jsonrender.rendering.batch import plan_batch, run_batch


def _write_inputs(root: Path, documents: dict[str, object]) -> None:
    for name, document in documents.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document), encoding="utf-8")


def _list_files(root: Path) -> list[str]:
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


@pytest.fixture
def workspace(tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "hello.j2").write_text("Hello, {{ name }}!")
    inputs = tmp_path / "models"
    inputs.mkdir()
    return tmp_path


def _config(workspace: Path, **overrides) -> RenderConfig:
    values = {
        "template_directory": workspace / "templates",
        "template_name": "hello.j2",
        "input_files": FileSet(directory=workspace / "models"),
        "output_directory": workspace / "out",
        "output_extension": "txt",
        "project_base_dir": workspace,
    }
    values.update(overrides)
    return RenderConfig(**values)


class TestRunBatch:
    def test_renders_one_file_per_input(self, workspace):
        _write_inputs(
            workspace / "models",
            {"x/one.json": {"name": "Ann"}, "x/two.json": {"name": "Bo"}},
        )
        result = run_batch(_config(workspace))

        assert result.ok
        assert result.rendered == [
            FileOutcome(PurePosixPath("x/one.json"), PurePosixPath("x/one.txt")),
            FileOutcome(PurePosixPath("x/two.json"), PurePosixPath("x/two.txt")),
        ]
        out = workspace / "out"
        assert _list_files(out) == ["x/one.txt", "x/two.txt"]
        assert (out / "x" / "one.txt").read_text(encoding="utf-8") == "Hello, Ann!"
        assert (out / "x" / "two.txt").read_text(encoding="utf-8") == "Hello, Bo!"

    def test_creates_nested_directories(self, workspace):
        _write_inputs(workspace / "models", {"a/b/c/model.json": {"name": "Deep"}})
        result = run_batch(_config(workspace, output_extension="html"))

        assert result.ok
        assert (workspace / "out" / "a" / "b" / "c" / "model.html").read_text() == "Hello, Deep!"

    def test_rerun_is_byte_identical(self, workspace):
        (workspace / "templates" / "hello.j2").write_text(
            "{% for k, v in data.items() %}{{ k }}={{ v }}\n{% endfor %}"
        )
        (workspace / "models" / "m.json").write_text(
            '{"data": {"b": 1.10, "a": "\\u00e9", "c": null}}', encoding="utf-8"
        )
        config = _config(workspace)

        assert run_batch(config).ok
        first = (workspace / "out" / "m.txt").read_bytes()
        assert run_batch(config).ok
        second = (workspace / "out" / "m.txt").read_bytes()

        assert first == second
        assert first == "b=1.10\na=é\nc=None\n".encode("utf-8")

    def test_explicit_included_paths(self, workspace):
        _write_inputs(
            workspace / "models", {"a.json": {"name": "A"}, "b.json": {"name": "B"}}
        )
        result = run_batch(_config(workspace), included=[PurePosixPath("b.json")])

        assert result.ok
        assert _list_files(workspace / "out") == ["b.txt"]

    def test_empty_batch_succeeds(self, workspace):
        result = run_batch(_config(workspace))
        assert result.ok
        assert result.rendered == []

    def test_render_error_stops_batch(self, workspace):
        _write_inputs(
            workspace / "models",
            {
                "1.json": {"name": "Ann"},
                "2.json": {"other": "x"},
                "3.json": {"name": "Cy"},
            },
        )
        result = run_batch(_config(workspace))

        assert not result.ok
        assert result.error.kind is ErrorKind.RENDERING
        assert result.error.input_path == PurePosixPath("2.json")
        assert [o.input_path for o in result.rendered] == [PurePosixPath("1.json")]
        # earlier output stays, failing and later files produce nothing
        assert _list_files(workspace / "out") == ["1.txt"]

    def test_runtime_error_in_expression_is_rendering_error(self, workspace):
        (workspace / "templates" / "hello.j2").write_text("{{ name + 1 }}")
        _write_inputs(workspace / "models", {"a.json": {"name": "Ann"}})
        result = run_batch(_config(workspace))

        assert result.error.kind is ErrorKind.RENDERING
        assert isinstance(result.error.cause, TypeError)
        assert _list_files(workspace / "out") == []

    def test_lenient_engine_renders_missing_fields_empty(self, workspace):
        _write_inputs(workspace / "models", {"a.json": {}})
        result = run_batch(
            _config(workspace, engine=EngineOptions(strict_undefined=False))
        )
        assert result.ok
        assert (workspace / "out" / "a.txt").read_text() == "Hello, !"

    def test_malformed_json_is_input_error(self, workspace):
        _write_inputs(workspace / "models", {"a.json": {"name": "Ann"}})
        (workspace / "models" / "b.json").write_text("{not json")
        _write_inputs(workspace / "models", {"c.json": {"name": "Cy"}})
        result = run_batch(_config(workspace))

        assert result.error.kind is ErrorKind.INPUT
        assert result.error.input_path == PurePosixPath("b.json")
        assert _list_files(workspace / "out") == ["a.txt"]

    def test_non_object_document_is_input_error(self, workspace):
        (workspace / "models" / "a.json").write_text("[1, 2, 3]")
        result = run_batch(_config(workspace))
        assert result.error.kind is ErrorKind.INPUT

    def test_unreadable_input_is_input_error(self, workspace):
        result = run_batch(_config(workspace), included=[PurePosixPath("missing.json")])
        assert result.error.kind is ErrorKind.INPUT
        assert isinstance(result.error.cause, OSError)

    def test_missing_template_is_configuration_error(self, workspace):
        _write_inputs(workspace / "models", {"a.json": {"name": "Ann"}})
        result = run_batch(_config(workspace, template_name="missing.j2"))

        assert result.error.kind is ErrorKind.CONFIGURATION
        assert result.rendered == []
        assert not (workspace / "out").exists()

    def test_broken_template_is_configuration_error(self, workspace):
        (workspace / "templates" / "hello.j2").write_text("{% for %}")
        _write_inputs(workspace / "models", {"a.json": {"name": "Ann"}})
        result = run_batch(_config(workspace))

        assert result.error.kind is ErrorKind.CONFIGURATION
        assert not (workspace / "out").exists()

    def test_missing_input_directory_is_configuration_error(self, workspace):
        config = _config(workspace, input_files=FileSet(directory=workspace / "nope"))
        result = run_batch(config)
        assert result.error.kind is ErrorKind.CONFIGURATION

    def test_output_collision_is_configuration_error(self, workspace):
        _write_inputs(
            workspace / "models", {"a.json": {"name": "A"}, "a.yaml": {"name": "B"}}
        )
        result = run_batch(_config(workspace))

        assert result.error.kind is ErrorKind.CONFIGURATION
        assert "a.txt" in result.error.message
        assert not (workspace / "out").exists()

    def test_error_message_names_the_file(self, workspace):
        (workspace / "models" / "bad.json").write_text("{")
        result = run_batch(_config(workspace))
        assert "bad.json" in str(result.error)
        assert str(result.error).startswith("input error")

    def test_rerun_with_output_inside_input_tree(self, tmp_path):
        (tmp_path / "templates").mkdir()
        (tmp_path / "templates" / "hello.j2").write_text("Hello, {{ name }}!")
        _write_inputs(tmp_path / "in", {"a.json": {"name": "Ann"}})
        config = RenderConfig(
            template_directory=tmp_path / "templates",
            template_name="hello.j2",
            input_files=FileSet(directory=tmp_path / "in"),
            output_directory=tmp_path / "in" / "gen",
            output_extension="txt",
            project_base_dir=tmp_path,
        )

        first = run_batch(config)
        second = run_batch(config)

        assert first.ok and second.ok
        assert second.rendered == first.rendered
        assert _list_files(tmp_path / "in") == ["a.json", "gen/a.txt"]
        assert (tmp_path / "in" / "gen" / "a.txt").read_text() == "Hello, Ann!"

    @pytest.mark.parametrize("unsafe", ["../x.json", "a/../../x.json", "/abs/x.json"])
    def test_included_path_outside_input_root_is_rejected(self, workspace, unsafe):
        _write_inputs(workspace, {"x.json": {"name": "Esc"}})
        result = run_batch(_config(workspace), included=[PurePosixPath(unsafe)])

        assert result.error.kind is ErrorKind.CONFIGURATION
        assert result.rendered == []
        assert not (workspace / "x.txt").exists()
        assert not (workspace / "out").exists()


class TestPlanBatch:
    def test_lists_mapping_without_rendering(self, workspace):
        _write_inputs(
            workspace / "models", {"x/one.json": {}, "README": {}, "y/.json": {}}
        )
        planned = plan_batch(_config(workspace))

        assert [(str(o.input_path), str(o.output_path)) for o in planned] == [
            ("README", "README.txt"),
            ("x/one.json", "x/one.txt"),
            ("y/.json", "y/.txt"),
        ]
        assert not (workspace / "out").exists()

    def test_reports_collisions(self, workspace):
        _write_inputs(workspace / "models", {"a.json": {}, "a.yaml": {}})
        planned = plan_batch(_config(workspace))
        assert isinstance(planned, BatchError)
        assert planned.kind is ErrorKind.CONFIGURATION


class TestRenderConfig:
    @pytest.mark.parametrize("extension", ["", ".txt", "a/b"])
    def test_rejects_bad_extension(self, workspace, extension):
        with pytest.raises(ValueError):
            _config(workspace, output_extension=extension)

    def test_is_immutable(self, workspace):
        config = _config(workspace)
        with pytest.raises(ValueError):
            config.output_extension = "html"
