import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from plume.core.exceptions import ToolExecutionError, ToolNotFoundError
from plume.infra.tools import ExternalTool, MarkdownConverter, XsltProcessor


def _which(available: dict[str, str]):
    return lambda name: available.get(name)


def _completed(args, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=args, returncode=returncode, stdout=stdout, stderr=stderr)


def test_locate_prefers_first_available_candidate():
    tool = ExternalTool(["primary", "fallback"])

    with patch("plume.infra.tools.shutil.which", _which({"fallback": "/bin/fallback"})):
        assert tool.locate() == "/bin/fallback"


def test_missing_tools_raise():
    with patch("plume.infra.tools.shutil.which", _which({})):
        with pytest.raises(ToolNotFoundError, match="pandoc"):
            MarkdownConverter().convert("# hi")


def test_markdown_converter_runs_pandoc_on_temp_file():
    seen: dict[str, str] = {}

    def fake_run(command, **kwargs):
        seen["input"] = Path(command[1]).read_text(encoding="utf-8")
        seen["path"] = command[1]
        return _completed(command, stdout="<p>hi</p>\n")

    with (
        patch("plume.infra.tools.shutil.which", _which({"pandoc": "/usr/bin/pandoc"})),
        patch("plume.infra.tools.subprocess.run", side_effect=fake_run) as run,
    ):
        html = MarkdownConverter().convert("hi")

    assert html == "<p>hi</p>\n"
    assert seen["input"] == "hi"
    assert not Path(seen["path"]).exists()
    command = run.call_args.args[0]
    assert command[0] == "/usr/bin/pandoc"
    assert command[2:] == ["-f", "markdown", "-t", "html"]


def test_markdown_converter_failure_raises_execution_error():
    with (
        patch("plume.infra.tools.shutil.which", _which({"pandoc": "/usr/bin/pandoc"})),
        patch(
            "plume.infra.tools.subprocess.run",
            side_effect=lambda command, **kwargs: _completed(command, returncode=64, stderr="bad input"),
        ),
    ):
        with pytest.raises(ToolExecutionError, match="bad input") as excinfo:
            MarkdownConverter().convert("x")

    assert excinfo.value.returncode == 64


def test_xsltproc_argument_order(tmp_path: Path):
    with (
        patch("plume.infra.tools.shutil.which", _which({"xsltproc": "/usr/bin/xsltproc"})),
        patch("plume.infra.tools.subprocess.run", side_effect=lambda c, **k: _completed(c)) as run,
    ):
        XsltProcessor().transform(tmp_path / "in.xml", tmp_path / "s.xsl", tmp_path / "out.html")

    assert run.call_args.args[0] == [
        "/usr/bin/xsltproc",
        "-o",
        str(tmp_path / "out.html"),
        str(tmp_path / "s.xsl"),
        str(tmp_path / "in.xml"),
    ]


def test_msxsl_is_used_when_xsltproc_is_missing(tmp_path: Path):
    with (
        patch("plume.infra.tools.shutil.which", _which({"msxsl.exe": "C:/tools/msxsl.exe"})),
        patch("plume.infra.tools.subprocess.run", side_effect=lambda c, **k: _completed(c)) as run,
    ):
        XsltProcessor().transform(tmp_path / "in.xml", tmp_path / "s.xsl", tmp_path / "out.html")

    assert run.call_args.args[0] == [
        "C:/tools/msxsl.exe",
        str(tmp_path / "in.xml"),
        str(tmp_path / "s.xsl"),
        "-o",
        str(tmp_path / "out.html"),
    ]
