"""Tests for the palette cache."""

import asyncio
import json

import pytest

from wallrizz.models import ExtractionError, Wallpaper
from wallrizz.palette_cache import PaletteCache
from wallrizz.scheduler import ConcurrencyLimitedScheduler


@pytest.fixture
def cache(tmp_path, test_logger):
    return PaletteCache(tmp_path / "cache" / "colours.json", ConcurrencyLimitedScheduler(2, test_logger), test_logger)


def wallpapers(*names):
    return [Wallpaper(unique_id=name, name=name.rsplit(".", 1)[0]) for name in names]


@pytest.mark.asyncio
async def test_sunset_example(cache, tmp_path, mocker):
    extract = mocker.AsyncMock(return_value="#112233 #445566\n#778899")
    await cache.build_missing(wallpapers("sunset.png"), extract, tmp_path)

    extract.assert_awaited_once_with(tmp_path / "sunset.png")
    assert await cache.get("sunset.png") == ["#112233", "#445566", "#778899"]
    assert json.loads(cache.path.read_text()) == {"sunset.png": ["#112233", "#445566", "#778899"]}


@pytest.mark.asyncio
async def test_fully_cached_is_idempotent(cache, tmp_path, mocker):
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text(json.dumps({"a.png": ["#000000"], "b.png": ["#ffffff"]}))
    extract = mocker.AsyncMock()
    flush = mocker.spy(cache, "flush_all")

    await cache.build_missing(wallpapers("a.png", "b.png"), extract, tmp_path)

    extract.assert_not_awaited()
    flush.assert_not_called()


@pytest.mark.asyncio
async def test_only_missing_extracted(cache, tmp_path, mocker):
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text(json.dumps({"a.png": ["#000000"]}))
    extract = mocker.AsyncMock(return_value="#abcdef")

    await cache.build_missing(wallpapers("a.png", "b.png"), extract, tmp_path)

    extract.assert_awaited_once_with(tmp_path / "b.png")
    assert json.loads(cache.path.read_text()) == {"a.png": ["#000000"], "b.png": ["#abcdef"]}


@pytest.mark.asyncio
async def test_fail_fast_batch(cache, tmp_path):
    async def extract(path):
        await asyncio.sleep(0.01)
        if path.name == "3.png":
            return "no colours here"
        return "#101010"

    with pytest.raises(ExtractionError):
        await cache.build_missing(wallpapers(*(f"{i}.png" for i in range(1, 6))), extract, tmp_path)

    assert "3.png" not in cache
    if cache.path.exists():
        assert "3.png" not in json.loads(cache.path.read_text())


@pytest.mark.asyncio
async def test_extractor_error_propagates(cache, tmp_path, mocker):
    extract = mocker.AsyncMock(side_effect=ExtractionError("magick: not found"))
    with pytest.raises(ExtractionError, match="not found"):
        await cache.build_missing(wallpapers("a.png"), extract, tmp_path)
    assert not cache.path.exists()


@pytest.mark.asyncio
async def test_get_loads_once(cache, mocker):
    load = mocker.spy(cache, "load")
    assert await cache.get("x") is None
    assert await cache.get("y") is None
    assert load.call_count == 1


@pytest.mark.asyncio
async def test_get_reads_document(cache):
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text(json.dumps({"a.png": ["#123456"]}))
    assert await cache.get("a.png") == ["#123456"]


@pytest.mark.asyncio
async def test_put_survives_load(cache):
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text(json.dumps({"a.png": ["#123456"]}))
    cache.put("b.png", ["#654321"])
    await cache.load()
    assert await cache.get("a.png") == ["#123456"]
    assert await cache.get("b.png") == ["#654321"]


@pytest.mark.asyncio
async def test_flush_keeps_persisted_entries(cache):
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text(json.dumps({"old.png": ["#000000"]}))
    cache.put("new.png", ["#ffffff"])
    await cache.flush_all()
    assert json.loads(cache.path.read_text()) == {"old.png": ["#000000"], "new.png": ["#ffffff"]}


def test_put_rejects_empty_palette(cache):
    with pytest.raises(ValueError):
        cache.put("a.png", [])


@pytest.mark.asyncio
async def test_corrupt_document(cache):
    cache.path.parent.mkdir(parents=True)
    cache.path.write_text("{not json")
    assert await cache.get("a.png") is None
    cache.put("a.png", ["#111111"])
    await cache.flush_all()
    assert json.loads(cache.path.read_text()) == {"a.png": ["#111111"]}
    assert not cache.path.with_suffix(".json.tmp").exists()
