"""
Test Suite for Chart Files and the machi-chart CLI

Rendering through mmdc is replaced with a fake subprocess.run so the tests
do not need the mermaid CLI installed.
"""

import subprocess
import textwrap

import pytest
from pydantic import ValidationError

from machi import ChartRenderError, Entry, Fork, MachiError
from machi.graph import ChartOptions, generate_chart, generate_chart_from_links, generate_state_links
from machi.graph.cli import load_states, main


STATES = [Entry("E1", ["a"]), Fork("F1", ["f"], [Entry("E2", ["b"])]), Entry("E3", [])]


@pytest.fixture
def fake_mmdc(monkeypatch):
    """Record mmdc invocations and write the requested output file."""
    calls = []

    def run(cmd, **kwargs):
        calls.append(cmd)
        source = cmd[cmd.index("-i") + 1]
        output = cmd[cmd.index("-o") + 1]
        with open(source, encoding="utf-8") as f:
            assert f.read().startswith("%%{init:")
        with open(output, "w") as f:
            f.write("rendered")
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(subprocess, "run", run)
    return calls


class TestChartOptions:
    """Option parsing and extension inference."""

    def test_extension_inferred_from_output(self, tmp_path):
        assert ChartOptions(output=tmp_path / "chart.svg").extension == "svg"

    def test_unsupported_extension_is_rejected(self, tmp_path):
        with pytest.raises(ValidationError) as exc:
            ChartOptions(output=tmp_path / "chart.gif")
        assert "not currently supported" in str(exc.value)

    def test_explicit_extension_rewrites_output(self, tmp_path):
        options = ChartOptions(output=tmp_path / "chart", extension="mmd")
        assert options.output == tmp_path / "chart.mmd"

    def test_sizes_must_be_positive(self, tmp_path):
        with pytest.raises(ValidationError):
            ChartOptions(output=tmp_path / "chart.png", width=0)

    def test_defaults_come_from_config(self, tmp_path):
        options = ChartOptions(output=tmp_path / "chart.png")
        assert options.theme == "light"
        assert options.direction == "vertical"
        assert options.mmdc_path == "mmdc"


class TestWriteChart:
    """Writing and rendering charts."""

    def test_mmd_is_written_directly(self, tmp_path, fake_mmdc):
        output = generate_chart(STATES, ChartOptions(output=tmp_path / "flow.mmd"))
        assert output.read_text(encoding="utf-8").splitlines()[1] == "graph TD"
        assert fake_mmdc == []

    def test_png_is_rendered_with_mmdc(self, tmp_path, fake_mmdc):
        output = generate_chart(STATES, ChartOptions(output=tmp_path / "flow.png", width=1024, height=768))
        assert output.read_text() == "rendered"
        cmd = fake_mmdc[0]
        assert cmd[0] == "mmdc"
        assert cmd[cmd.index("-w") + 1] == "1024"
        assert cmd[cmd.index("-H") + 1] == "768"
        assert cmd[cmd.index("-b") + 1] == "#ffffff"

    def test_chart_from_links(self, tmp_path):
        links = generate_state_links(STATES)[:1]
        output = generate_chart_from_links(links, ChartOptions(output=tmp_path / "one.mmd", theme="dark"))
        lines = output.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        assert "#000000" in lines[0]

    def test_intermediate_file_is_removed(self, tmp_path, fake_mmdc):
        generate_chart(STATES, ChartOptions(output=tmp_path / "flow.svg"))
        assert sorted(p.name for p in tmp_path.iterdir()) == ["flow.svg"]

    def test_missing_mmdc_raises(self, tmp_path):
        options = ChartOptions(output=tmp_path / "flow.png", mmdc_path=str(tmp_path / "no-such-mmdc"))
        with pytest.raises(ChartRenderError) as exc:
            generate_chart(STATES, options)
        assert "not found" in str(exc.value)
        assert list(tmp_path.iterdir()) == []

    def test_failing_mmdc_raises(self, tmp_path, monkeypatch):
        def run(cmd, **kwargs):
            raise subprocess.CalledProcessError(1, cmd, output="", stderr="parse error")

        monkeypatch.setattr(subprocess, "run", run)
        with pytest.raises(ChartRenderError) as exc:
            generate_chart(STATES, ChartOptions(output=tmp_path / "flow.pdf"))
        assert "parse error" in str(exc.value)


@pytest.fixture
def states_module(tmp_path, monkeypatch):
    """An importable module exporting a flow."""
    (tmp_path / "sample_flow.py").write_text(
        textwrap.dedent(
            """
            from machi import Entry, Fork

            states = [
                Entry("Start", ["started"]),
                Fork("Branch", ["branch"], [Entry("Inside", ["inside"])]),
                Entry("End", []),
            ]
            OTHER = "not a list"
            """
        )
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    return "sample_flow"


class TestCli:
    """The machi-chart entry point."""

    def test_load_states_from_module(self, states_module):
        assert [s.id if hasattr(s, "id") else s.name for s in load_states(states_module)] == ["Start", "Branch", "End"]

    def test_load_states_with_attribute(self, states_module):
        assert len(load_states(f"{states_module}:states")) == 3

    def test_load_states_missing_module(self):
        with pytest.raises(MachiError):
            load_states("no_such_module_anywhere")

    def test_load_states_missing_export(self, states_module):
        with pytest.raises(MachiError) as exc:
            load_states(f"{states_module}:missing")
        assert "'missing'" in str(exc.value)

    def test_load_states_rejects_non_list(self, states_module):
        with pytest.raises(MachiError):
            load_states(f"{states_module}:OTHER")

    def test_main_writes_chart(self, tmp_path, states_module, capsys):
        output = tmp_path / "out.mmd"
        assert main(["--states", states_module, "-o", str(output), "-d", "horizontal"]) == 0
        assert output.read_text(encoding="utf-8").splitlines()[1] == "graph LR"
        assert "Chart generated to" in capsys.readouterr().out

    def test_main_writes_pathways(self, tmp_path, states_module):
        output = tmp_path / "paths.mmd"
        assert main(["-s", states_module, "-o", str(output), "--paths", "End"]) == 0
        assert "_1[" in output.read_text(encoding="utf-8")

    def test_main_fails_on_bad_states(self, tmp_path, states_module):
        assert main(["-s", f"{states_module}:missing", "-o", str(tmp_path / "out.mmd")]) == 1

    def test_main_fails_on_bad_extension(self, tmp_path, states_module):
        assert main(["-s", states_module, "-o", str(tmp_path / "out.gif")]) == 1
