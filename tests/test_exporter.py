"""
Tests for the Playwright exporter, driven through fake browser objects.
"""

import asyncio
from pathlib import Path

import pytest

from design_doc_pdf.config import RenderConfiguration
from design_doc_pdf.errors import ExportError, RenderEngineError
from design_doc_pdf.exporter import Exporter
from design_doc_pdf.renderer import RenderedPage

from conftest import PDF_BYTES


def make_page(diagram_count=1):
    return RenderedPage(html="<html><body>page</body></html>", title="Doc", diagram_count=diagram_count)


def make_config(tmp_path, name="out.pdf", **overrides):
    return RenderConfiguration(output_path=tmp_path / name, **overrides)


def run_export(config, page, engine_config=None):
    async def go():
        async with Exporter(config) as exporter:
            return await exporter.export(page, engine_config)
    return asyncio.run(go())


def test_export_writes_pdf_and_reports_size(fake_engine, tmp_path):
    fake_engine.report.update(expected=1, rendered=1)
    config = make_config(tmp_path)

    artifact = run_export(config, make_page())

    assert artifact.path == config.output_path
    assert artifact.size == len(PDF_BYTES)
    assert config.output_path.read_bytes() == PDF_BYTES
    assert artifact.diagrams.rendered == 1
    assert artifact.diagrams.timed_out is False
    # no temp files left beside the output
    assert [p.name for p in tmp_path.iterdir()] == ["out.pdf"]


def test_pdf_options_follow_configuration(fake_engine, tmp_path):
    config = make_config(tmp_path, page_format="letter", margin="1in 0.5in", print_background=False)

    run_export(config, make_page(0))

    options = next(details["options"] for name, _, details in fake_engine.events if name == "pdf")
    assert options["format"] == "Letter"
    assert options["margin"] == {"top": "1in", "right": "0.5in", "bottom": "1in", "left": "0.5in"}
    assert options["print_background"] is False
    assert options["display_header_footer"] is True


def test_page_numbers_can_be_disabled(fake_engine, tmp_path):
    run_export(make_config(tmp_path, page_numbers=False), make_page(0))

    options = next(details["options"] for name, _, details in fake_engine.events if name == "pdf")
    assert "display_header_footer" not in options


def test_launch_uses_no_sandbox_flag(fake_engine, tmp_path):
    run_export(make_config(tmp_path), make_page(0))

    args = next(details["args"] for name, _, details in fake_engine.events if name == "launch")
    assert "--no-sandbox" in args


def test_zero_diagrams_never_waits_for_signal(fake_engine, tmp_path):
    fake_engine.signal_delay = 60

    artifact = run_export(make_config(tmp_path, diagram_timeout=0.05), make_page(0))

    assert "wait" not in fake_engine.names()
    assert "report" not in fake_engine.names()
    assert artifact.diagrams.expected == 0
    assert artifact.diagrams.timed_out is False


def test_pagination_blocked_until_completion_signal(fake_engine, tmp_path):
    fake_engine.signal_delay = 0.3
    fake_engine.report.update(expected=1, rendered=1)

    artifact = run_export(make_config(tmp_path, diagram_timeout=5), make_page())

    names = fake_engine.names()
    assert names.index("wait") < names.index("signal") < names.index("pdf")
    assert fake_engine.time_of("pdf") - fake_engine.time_of("wait") >= 0.25
    assert artifact.diagrams.timed_out is False


def test_timeout_abandons_diagrams_and_still_exports(fake_engine, tmp_path):
    fake_engine.signal_delay = 60
    fake_engine.pending_on_abandon = 2
    fake_engine.report.update(expected=2, abandoned=True)
    config = make_config(tmp_path, diagram_timeout=0.2)

    artifact = run_export(config, make_page(2))

    names = fake_engine.names()
    assert names.index("timeout") < names.index("abandon") < names.index("pdf")
    assert "signal" not in names
    assert artifact.diagrams.timed_out is True
    assert artifact.diagrams.rendered == 0
    assert config.output_path.exists()


def test_timeout_is_logged_as_warning(fake_engine, tmp_path, capsys):
    fake_engine.signal_delay = 60
    fake_engine.pending_on_abandon = 1

    run_export(make_config(tmp_path, diagram_timeout=0.1), make_page())

    out = capsys.readouterr().out
    assert "[WARNING]" in out
    assert "did not finish within 0.1s" in out


def test_malformed_diagram_errors_are_reported_not_raised(fake_engine, tmp_path, capsys):
    fake_engine.report.update(expected=2, rendered=1, failed=1, errors=["Parse error on line 2"])

    artifact = run_export(make_config(tmp_path), make_page(2))

    assert artifact.diagrams.rendered == 1
    assert artifact.diagrams.failed == 1
    assert artifact.diagrams.errors == ["Parse error on line 2"]
    assert "Parse error on line 2" in capsys.readouterr().out
    assert artifact.size > 0


def test_launch_failure_raises_render_engine_error(fake_engine, tmp_path):
    fake_engine.launch_error = Exception("No usable sandbox!")
    config = make_config(tmp_path)

    with pytest.raises(RenderEngineError, match="No usable sandbox"):
        run_export(config, make_page())
    assert not config.output_path.exists()


def test_browser_crash_raises_render_engine_error(fake_engine, tmp_path):
    fake_engine.pdf_error = Exception("Target closed")
    config = make_config(tmp_path)

    with pytest.raises(RenderEngineError):
        run_export(config, make_page(0))
    assert not config.output_path.exists()
    assert all(context.closed for context in fake_engine.contexts)


def test_pagination_failure_raises_export_error(fake_engine, tmp_path):
    fake_engine.pdf_error = Exception("Printing failed")
    config = make_config(tmp_path)

    with pytest.raises(ExportError, match="Printing failed"):
        run_export(config, make_page(0))
    assert not config.output_path.exists()


def test_empty_pdf_raises_export_error(fake_engine, tmp_path):
    fake_engine.pdf_result = b""
    config = make_config(tmp_path)

    with pytest.raises(ExportError, match="empty PDF"):
        run_export(config, make_page(0))
    assert list(tmp_path.iterdir()) == []


def test_unwritable_destination_raises_export_error(fake_engine, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    config = RenderConfiguration(output_path=blocker / "out.pdf")

    with pytest.raises(ExportError, match="Failed to write PDF"):
        run_export(config, make_page(0))


def test_failed_export_keeps_previous_output_intact(fake_engine, tmp_path):
    config = make_config(tmp_path)
    config.output_path.write_bytes(b"previous")
    fake_engine.pdf_error = Exception("Printing failed")

    with pytest.raises(ExportError):
        run_export(config, make_page(0))
    assert config.output_path.read_bytes() == b"previous"


def test_concurrent_exports_share_browser_but_not_context(fake_engine, tmp_path):
    fake_engine.signal_delay = 0.1
    fake_engine.report.update(expected=1, rendered=1)
    first = make_config(tmp_path, "first.pdf")
    second = make_config(tmp_path, "second.pdf")

    async def go():
        async with Exporter(first) as exporter:
            return await asyncio.gather(
                exporter.export(make_page(), first),
                exporter.export(make_page(), second),
            )

    artifacts = asyncio.run(go())

    assert [a.path for a in artifacts] == [first.output_path, second.output_path]
    assert first.output_path.exists() and second.output_path.exists()
    assert fake_engine.launches == 1
    assert len(fake_engine.contexts) == 2
    assert fake_engine.contexts[0] is not fake_engine.contexts[1]
    assert all(context.closed for context in fake_engine.contexts)


def test_html_is_loaded_from_file_uri(fake_engine, tmp_path):
    run_export(make_config(tmp_path), make_page(0))

    url = next(details["url"] for name, _, details in fake_engine.events if name == "goto")
    assert url.startswith("file://")
    assert Path(url).name == "page.html"


def test_navigation_does_not_wait_for_subresources(fake_engine, tmp_path):
    fake_engine.report.update(expected=1, rendered=1)

    run_export(make_config(tmp_path), make_page())

    goto = next(details for name, _, details in fake_engine.events if name == "goto")
    assert goto["wait_until"] == "domcontentloaded"
    names = fake_engine.names()
    assert names.index("signal") < names.index("loaded") < names.index("pdf")


def test_stalled_subresource_load_still_exports(fake_engine, tmp_path, capsys):
    fake_engine.load_delay = 60
    config = make_config(tmp_path, diagram_timeout=0.1)

    artifact = run_export(config, make_page(0))

    names = fake_engine.names()
    assert names.index("load_timeout") < names.index("pdf")
    assert artifact.size == len(PDF_BYTES)
    assert "still loading after 0.1s" in capsys.readouterr().out


def test_unresponsive_page_after_timeout_raises_render_engine_error(fake_engine, tmp_path):
    fake_engine.signal_delay = 60
    fake_engine.evaluate_hangs = True
    config = make_config(tmp_path, diagram_timeout=0.1)

    with pytest.raises(RenderEngineError, match="stopped responding"):
        run_export(config, make_page())
    assert "evaluate_stuck" in fake_engine.names()
    assert "pdf" not in fake_engine.names()
    assert not config.output_path.exists()
    assert all(context.closed for context in fake_engine.contexts)
