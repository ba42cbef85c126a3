"""Tests for ExportEngine."""

import asyncio
import json
import textwrap

import pytest

from side_export.config import ExportConfiguration
from side_export.export.engine import ExportEngine, export_project
from side_export.export.models import (
    EmittedFile,
    ExportMode,
    FormatLoadError,
    PluginLoadError,
    ProjectLoadError,
    UnitStatus,
)
from side_export.export.plugins import get_registry


def written_files(directory):
    if not directory.exists():
        return {}
    return {
        str(p.relative_to(directory)): p.read_text(encoding="utf-8")
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    }


# =============================================================================
# Mode selection
# =============================================================================


class TestModeSelection:
    """Tests for which collection and emitter a run uses."""

    @pytest.mark.smoke
    @pytest.mark.asyncio
    async def test_suite_scenario(self, make_config, stub_format, output_dir):
        """Suite mode with a filter emits exactly the matching suite."""
        config = make_config(mode="suite", filter="smoke")
        summary = await ExportEngine(config, output_format=stub_format).run()

        assert stub_format.calls == [("suite", "smoke")]
        assert list(written_files(output_dir)) == ["smoke.suite.txt"]
        assert summary.mode == ExportMode.SUITE
        assert summary.to_dict()["written"] == 1

    @pytest.mark.asyncio
    async def test_test_mode_emits_each_test_once(self, make_config, stub_format, output_dir):
        config = make_config(mode="test")
        await ExportEngine(config, output_format=stub_format).run()

        assert sorted(stub_format.calls) == sorted([
            ("test", "login"),
            ("test", "checkout"),
            ("test", "logout"),
        ])
        assert sorted(written_files(output_dir)) == [
            "checkout.test.txt",
            "login.test.txt",
            "logout.test.txt",
        ]

    @pytest.mark.asyncio
    async def test_suite_mode_never_calls_test_emitter(self, make_config, stub_format):
        await ExportEngine(make_config(mode="suite"), output_format=stub_format).run()
        assert {kind for kind, _ in stub_format.calls} == {"suite"}
        assert len(stub_format.calls) == 2

    @pytest.mark.asyncio
    async def test_filter_scenario(self, tmp_path, stub_format):
        project_path = tmp_path / "greetings.side"
        project_path.write_text(json.dumps({
            "url": "https://greet.example.com",
            "tests": [{"name": n, "commands": []} for n in ["hello-world", "goodbye-world", "other"]],
            "suites": [],
        }), encoding="utf-8")

        config = ExportConfiguration.build(
            format="python-selenium",
            project=str(project_path),
            output_dir=str(tmp_path / "out"),
            filter="^(hello|goodbye).*$",
            mode="test",
        )
        summary = await ExportEngine(config, output_format=stub_format).run()

        assert [o.name for o in summary.outcomes] == ["hello-world", "goodbye-world"]
        assert summary.skipped == 1

    @pytest.mark.asyncio
    async def test_no_matches(self, make_config, stub_format, output_dir):
        summary = await ExportEngine(make_config(filter="^nothing$"), output_format=stub_format).run()
        assert summary.outcomes == []
        assert summary.skipped == 2
        assert summary.exit_code == 0
        assert stub_format.calls == []
        assert not output_dir.exists()


# =============================================================================
# Isolation and ordering
# =============================================================================


class TestIsolation:
    """Tests for per-unit failure handling."""

    @pytest.mark.asyncio
    async def test_failed_unit_does_not_stop_others(self, make_config, failing_format, output_dir):
        output_format = failing_format("checkout")
        summary = await ExportEngine(make_config(mode="test"), output_format=output_format).run()

        assert sorted(written_files(output_dir)) == ["login.test.txt", "logout.test.txt"]
        assert [o.name for o in summary.failed] == ["checkout"]
        assert "cannot emit checkout" in summary.failed[0].error
        assert summary.exit_code == 2

    @pytest.mark.asyncio
    async def test_every_unit_failing(self, make_config, failing_format, output_dir):
        output_format = failing_format("login", "checkout", "logout")
        summary = await ExportEngine(make_config(mode="test"), output_format=output_format).run()

        assert summary.succeeded == []
        assert len(summary.failed) == 3
        assert written_files(output_dir) == {}

    @pytest.mark.asyncio
    async def test_write_failure_is_local(self, make_config, tmp_path, project_file):
        class ClashingFormat:
            async def emit_test(self, project, test_name):
                # "login" writes into a path whose parent is a regular file
                name = "blocker/login.txt" if test_name == "login" else f"{test_name}.txt"
                return EmittedFile(body=test_name, filename=name)

            async def emit_suite(self, project, suite_name):
                raise NotImplementedError

        output = tmp_path / "clash"
        output.mkdir()
        (output / "blocker").write_text("", encoding="utf-8")

        config = make_config(mode="test", output_dir=str(output))
        summary = await ExportEngine(config, output_format=ClashingFormat()).run()

        assert [o.name for o in summary.failed] == ["login"]
        assert (output / "checkout.txt").read_text(encoding="utf-8") == "checkout"
        assert (output / "logout.txt").exists()

    @pytest.mark.asyncio
    async def test_filename_escaping_output_dir_fails_unit(self, make_config):
        class EscapingFormat:
            async def emit_test(self, project, test_name):
                return EmittedFile(body="", filename=f"../{test_name}.txt")

            async def emit_suite(self, project, suite_name):
                return EmittedFile(body="", filename=f"{suite_name}.txt")

        summary = await ExportEngine(make_config(mode="test"), output_format=EscapingFormat()).run()
        assert len(summary.failed) == 3

    @pytest.mark.asyncio
    async def test_outcomes_in_issue_order(self, make_config):
        """Outcomes follow filter order even when completion order differs."""
        delays = {"login": 0.03, "checkout": 0.0, "logout": 0.01}
        completed = []

        class SlowFormat:
            async def emit_test(self, project, test_name):
                await asyncio.sleep(delays[test_name])
                completed.append(test_name)
                return EmittedFile(body=test_name, filename=f"{test_name}.txt")

            async def emit_suite(self, project, suite_name):
                raise NotImplementedError

        summary = await ExportEngine(make_config(mode="test"), output_format=SlowFormat()).run()

        assert completed == ["checkout", "logout", "login"]
        assert [o.name for o in summary.outcomes] == ["login", "checkout", "logout"]

    @pytest.mark.asyncio
    async def test_units_run_concurrently(self, make_config):
        """A unit waiting on a sibling completes instead of deadlocking."""
        started = asyncio.Event()

        class WaitingFormat:
            async def emit_test(self, project, test_name):
                if test_name == "login":
                    await asyncio.wait_for(started.wait(), timeout=1)
                elif test_name == "logout":
                    started.set()
                return EmittedFile(body="", filename=f"{test_name}.txt")

            async def emit_suite(self, project, suite_name):
                raise NotImplementedError

        summary = await ExportEngine(make_config(mode="test"), output_format=WaitingFormat()).run()
        assert summary.failed == []


# =============================================================================
# Output content
# =============================================================================


class TestOutput:
    """Tests for written content."""

    @pytest.mark.asyncio
    async def test_base_url_override(self, make_config, stub_format, output_dir):
        config = make_config(filter="smoke", base_url="http://localhost:3000")
        await ExportEngine(config, output_format=stub_format).run()

        body = (output_dir / "smoke.suite.txt").read_text(encoding="utf-8")
        assert body == "// suite smoke\nopen('http://localhost:3000/start')\n"

    @pytest.mark.asyncio
    async def test_without_base_url_body_unchanged(self, make_config, stub_format, output_dir):
        await ExportEngine(make_config(filter="smoke"), output_format=stub_format).run()

        body = (output_dir / "smoke.suite.txt").read_text(encoding="utf-8")
        assert body == "// suite smoke\nopen('https://shop.example.com/start')\n"

    @pytest.mark.asyncio
    async def test_idempotent(self, make_config, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"

        await ExportEngine(make_config(output_dir=str(first))).run()
        await ExportEngine(make_config(output_dir=str(second))).run()

        assert written_files(first)
        assert written_files(first) == written_files(second)

    @pytest.mark.asyncio
    async def test_builtin_format_end_to_end(self, make_config, output_dir):
        summary = await export_project(make_config(format="typescript-playwright", mode="suite"))

        assert summary.exit_code == 0
        files = written_files(output_dir)
        assert sorted(files) == ["regression.spec.ts", "smoke.spec.ts"]
        assert "test.describe.configure({ mode: 'parallel' });" in files["regression.spec.ts"]


# =============================================================================
# Fatal errors
# =============================================================================


class TestFatalErrors:
    """Errors that stop the run before any output exists."""

    @pytest.mark.asyncio
    async def test_missing_project(self, make_config, tmp_path, stub_format, output_dir):
        config = make_config(project=str(tmp_path / "missing.side"))
        with pytest.raises(ProjectLoadError):
            await ExportEngine(config, output_format=stub_format).run()
        assert stub_format.calls == []
        assert not output_dir.exists()

    @pytest.mark.asyncio
    async def test_format_that_cannot_load(self, make_config, tmp_path):
        broken = tmp_path / "broken_format.py"
        broken.write_text("x = 1\n", encoding="utf-8")
        with pytest.raises(FormatLoadError):
            await ExportEngine(make_config(format=str(broken))).run()

    @pytest.mark.asyncio
    async def test_missing_plugin(self, tmp_path, project_data, stub_format):
        project_data["plugins"] = ["./plugins/missing.py"]
        project_path = tmp_path / "with_plugins.side"
        project_path.write_text(json.dumps(project_data), encoding="utf-8")

        config = ExportConfiguration.build(
            format="python-selenium",
            project=str(project_path),
            output_dir=str(tmp_path / "out"),
        )
        with pytest.raises(PluginLoadError):
            await ExportEngine(config, output_format=stub_format).run()
        assert stub_format.calls == []


# =============================================================================
# Plugins
# =============================================================================


class TestPlugins:
    """Tests for project plugins during a run."""

    @pytest.mark.asyncio
    async def test_plugin_command_used_by_builtin_format(self, tmp_path, project_data):
        plugin_dir = tmp_path / "plugins"
        plugin_dir.mkdir()
        (plugin_dir / "highlight.py").write_text(textwrap.dedent(
            """
            def register(registry):
                registry.register_command(
                    "highlight",
                    lambda command, language: f'self.highlight("{command.target}")',
                )
            """
        ), encoding="utf-8")

        project_data["plugins"] = ["./plugins/highlight.py"]
        project_data["tests"][0]["commands"].append(
            {"id": "c9", "comment": "", "command": "highlight", "target": "#logo", "value": ""}
        )
        project_path = tmp_path / "plugged.side"
        project_path.write_text(json.dumps(project_data), encoding="utf-8")

        config = ExportConfiguration.build(
            format="python-selenium",
            project=str(project_path),
            output_dir=str(tmp_path / "out"),
            filter="^login$",
            mode="test",
        )
        summary = await ExportEngine(config).run()

        assert summary.outcomes[0].status == UnitStatus.WRITTEN
        body = (tmp_path / "out" / "test_login.py").read_text(encoding="utf-8")
        assert '        self.highlight("#logo")' in body
        assert get_registry().has_command("highlight")
        assert not get_registry().frozen

    @pytest.mark.asyncio
    async def test_sequential_runs_with_different_plugins(self, tmp_path, project_data):
        for index in (1, 2):
            run_dir = tmp_path / f"run{index}"
            run_dir.mkdir()
            (run_dir / f"plug{index}.py").write_text(textwrap.dedent(
                f"""
                def register(registry):
                    registry.register_command("x{index}", lambda command, language: "x{index}()")
                """
            ), encoding="utf-8")
            project_data["plugins"] = [f"./plug{index}.py"]
            project_path = run_dir / "project.side"
            project_path.write_text(json.dumps(project_data), encoding="utf-8")

            config = ExportConfiguration.build(
                format="python-selenium",
                project=str(project_path),
                output_dir=str(run_dir / "out"),
            )
            summary = await export_project(config)
            assert summary.exit_code == 0

        registry = get_registry()
        assert registry.has_command("x1")
        assert registry.has_command("x2")

    @pytest.mark.asyncio
    async def test_registry_frozen_during_emission(self, make_config):
        class RegisteringFormat:
            async def emit_test(self, project, test_name):
                get_registry().register_command("late", lambda command, language: None)
                return EmittedFile(body="", filename=f"{test_name}.txt")

            async def emit_suite(self, project, suite_name):
                raise NotImplementedError

        summary = await ExportEngine(make_config(mode="test"), output_format=RegisteringFormat()).run()

        assert len(summary.failed) == 3
        assert all("after plugins are loaded" in o.error for o in summary.failed)
        assert not get_registry().frozen


# =============================================================================
# Output path ownership
# =============================================================================


class TestOutputPaths:
    """Tests for units competing for the same file."""

    @pytest.mark.asyncio
    async def test_second_unit_for_same_file_fails(self, make_config, output_dir):
        class CollidingFormat:
            async def emit_test(self, project, test_name):
                return EmittedFile(body=test_name, filename="shared.txt")

            async def emit_suite(self, project, suite_name):
                raise NotImplementedError

        summary = await ExportEngine(make_config(mode="test"), output_format=CollidingFormat()).run()

        assert [o.name for o in summary.succeeded] == ["login"]
        assert [o.name for o in summary.failed] == ["checkout", "logout"]
        assert all("already writes to" in o.error for o in summary.failed)
        assert (output_dir / "shared.txt").read_text(encoding="utf-8") == "login"

    @pytest.mark.asyncio
    async def test_case_folded_names_do_not_overwrite(self, tmp_path):
        project_path = tmp_path / "cased.side"
        project_path.write_text(json.dumps({
            "url": "https://shop.example.com",
            "tests": [
                {"name": "Login", "commands": [{"command": "open", "target": "/a"}]},
                {"name": "login", "commands": [{"command": "open", "target": "/b"}]},
            ],
        }), encoding="utf-8")
        config = ExportConfiguration.build(
            format="python-selenium",
            project=str(project_path),
            output_dir=str(tmp_path / "out"),
            mode="test",
        )

        summary = await ExportEngine(config).run()

        assert len(summary.succeeded) == 1
        assert len(summary.failed) == 1
        assert summary.exit_code == 2
        assert [p.name for p in (tmp_path / "out").iterdir()] == ["test_login.py"]

    @pytest.mark.asyncio
    async def test_claims_reset_between_runs(self, make_config, stub_format):
        engine = ExportEngine(make_config(filter="smoke"), output_format=stub_format)
        await engine.run()
        summary = await engine.run()
        assert summary.failed == []
