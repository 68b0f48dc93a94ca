"""Tests for the documentation generator, driven by an in-memory catalog."""
import logging
from pathlib import Path

import pytest

from catalog_docs.config import DocsConfig
from catalog_docs.db_introspect.models import SCALAR_FUNCTION, RoutineRef
from catalog_docs.reports.generator import generate_documentation
from catalog_docs.reports.writer import prepare_output_folder, write_document


def _config(output_folder: Path, **kwargs) -> DocsConfig:
    return DocsConfig(
        output_folder=output_folder,
        connection_string="Server=.;Database=Shop;Trusted_Connection=True;",
        **kwargs,
    )


@pytest.mark.asyncio
async def test_writes_layout(tmp_path, fake_reader, generated_at):
    """Each object lands in its own [schema].[name] folder under its kind."""
    out = tmp_path / "docs"
    result = await generate_documentation(_config(out), reader=fake_reader, now=generated_at)

    expected = [
        "Tables/[dbo].[Orders]/dbo.Orders.md",
        "Tables/[sales].[Customers]/sales.Customers.md",
        "Views/[dbo].[vOpenOrders]/dbo.vOpenOrders.md",
        "Procedures/[dbo].[usp_PlaceOrder]/dbo.usp_PlaceOrder.md",
        "Functions/[dbo].[fn_Tax]/dbo.fn_Tax.md",
        "Functions/[sales].[fn_Open]/sales.fn_Open.md",
    ]
    for rel in expected:
        assert (out / rel).is_file(), rel

    assert result.summary_path == out / "summary.md"
    assert result.summary_path.is_file()
    assert len(result.written) == len(expected)
    assert (result.tables, result.views, result.procedures, result.functions) == (2, 1, 1, 2)
    assert fake_reader.opened and fake_reader.closed


@pytest.mark.asyncio
async def test_documents_are_utf8_without_bom(tmp_path, fake_reader, generated_at):
    out = tmp_path / "docs"
    await generate_documentation(_config(out), reader=fake_reader, now=generated_at)

    raw = (out / "Tables/[dbo].[Orders]/dbo.Orders.md").read_bytes()
    assert not raw.startswith(b"\xef\xbb\xbf")
    assert b"\r\n" not in raw
    assert "✓".encode("utf-8") in raw
    assert raw.decode("utf-8").startswith("# dbo.Orders\n\n**Generated:** 2024-05-06 07:08:09 +02:00\n")


@pytest.mark.asyncio
async def test_cleans_output_folder(tmp_path, fake_reader, generated_at):
    out = tmp_path / "docs"
    (out / "Stale" / "nested").mkdir(parents=True)
    (out / "Stale" / "nested" / "old.md").write_text("old")
    (out / "leftover.txt").write_text("old")

    await generate_documentation(_config(out), reader=fake_reader, now=generated_at)

    assert not (out / "Stale").exists()
    assert not (out / "leftover.txt").exists()
    assert (out / "summary.md").exists()


@pytest.mark.asyncio
async def test_clean_output_disabled(tmp_path, fake_reader, generated_at):
    out = tmp_path / "docs"
    out.mkdir()
    (out / "keep.txt").write_text("keep")

    await generate_documentation(_config(out, clean_output=False), reader=fake_reader, now=generated_at)

    assert (out / "keep.txt").read_text() == "keep"


@pytest.mark.asyncio
async def test_schema_filter(tmp_path, fake_reader, generated_at):
    out = tmp_path / "docs"
    result = await generate_documentation(_config(out, schemas=["sales"]), reader=fake_reader, now=generated_at)

    assert (result.tables, result.views, result.procedures, result.functions) == (1, 0, 0, 1)
    assert (out / "Tables/[sales].[Customers]/sales.Customers.md").exists()
    assert not (out / "Tables").joinpath("[dbo].[Orders]").exists()

    summary = (out / "summary.md").read_text(encoding="utf-8")
    assert "## Views" not in summary
    assert "Orders" not in summary


@pytest.mark.asyncio
async def test_query_failure_aborts(tmp_path, fake_reader, generated_at):
    """A failing catalog query propagates and the summary is never written."""
    async def boom():
        raise RuntimeError("catalog query failed")

    fake_reader.list_views = boom
    out = tmp_path / "docs"

    with pytest.raises(RuntimeError, match="catalog query failed"):
        await generate_documentation(_config(out), reader=fake_reader, now=generated_at)

    assert fake_reader.closed
    assert not (out / "summary.md").exists()


@pytest.mark.asyncio
async def test_logs_each_written_file(tmp_path, fake_reader, generated_at, caplog):
    out = tmp_path / "docs"
    with caplog.at_level(logging.INFO, logger="catalog_docs"):
        await generate_documentation(_config(out), reader=fake_reader, now=generated_at)

    wrote = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Wrote ")]
    assert len(wrote) == 7
    assert wrote[-1] == f"Wrote {out / 'summary.md'}"


@pytest.mark.asyncio
async def test_overloads_written_to_one_document(tmp_path, fake_reader, generated_at):
    """Same-named functions land in one page holding every definition."""
    fake_reader.routines = [
        RoutineRef(2, "public", "f", SCALAR_FUNCTION, "CREATE FUNCTION public.f(a text)"),
        RoutineRef(1, "public", "f", SCALAR_FUNCTION, "CREATE FUNCTION public.f(a int)"),
    ]
    out = tmp_path / "docs"
    result = await generate_documentation(_config(out), reader=fake_reader, now=generated_at)

    page = out / "Functions/[public].[f]/public.f.md"
    assert page in result.written
    assert len(result.written) == len(set(result.written))
    assert len(list((out / "Functions").rglob("*.md"))) == 1

    content = page.read_text(encoding="utf-8")
    assert content.index("public.f(a int)") < content.index("public.f(a text)")
    assert result.functions == 2

    summary = (out / "summary.md").read_text(encoding="utf-8")
    assert summary.count("(Functions/[public].[f]/public.f.md)") == 1


def test_prepare_creates_missing_folder(tmp_path):
    out = prepare_output_folder(tmp_path / "a" / "b")
    assert out.is_dir()


def test_write_document_creates_parents(tmp_path):
    path = write_document(tmp_path, "Views/[x].[y]/x.y.md", "hello\n")
    assert path.read_text(encoding="utf-8") == "hello\n"
