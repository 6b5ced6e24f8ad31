"""
Tests for loading biome profiles into a registry.
"""

import json
import logging
import threading
import time

import pytest

from biomes.errors import (
    BiomeLoadError,
    FormulaSyntaxError,
    MalformedConfigError,
    UnresolvedSymbolError,
)
from biomes.profile import BiomeProfile
from biomes.registry import BiomeRegistry, LazyBiomeRegistry, load_biomes
from conftest import make_context

GOOD = {
    "Samplers": [{"Name": "Wet", "Type": "Formula", "Formula": "Add(Moisture, 1)"}],
    "Voxel Density": "Wet",
    "Voxel Type": "Voxel(Stone)",
    "Voxel Shape": "SLAB",
}

DEEP_FORMULA = "Add(1," * 3000 + "1" + ")" * 3000


def write_profile(directory, name, document):
    path = directory / f"{name}.json"
    if isinstance(document, str):
        path.write_text(document)
    else:
        path.write_text(json.dumps(document))
    return path


class TestLoadBiomes:
    def test_loads_every_profile(self, tmp_path, voxel_types, noise):
        write_profile(tmp_path, "plains", GOOD)
        write_profile(tmp_path, "desert", dict(GOOD, **{"Voxel Density": "Add(1,2)"}))

        registry = load_biomes(tmp_path, voxel_types, noise)

        assert registry.names() == ["desert", "plains"]
        assert len(registry) == 2
        assert "plains" in registry
        assert registry.failures == {}
        assert registry.get_biome_by_name("desert").sample_density(make_context()) == 3.0

    def test_name_is_file_stem(self, tmp_path, voxel_types, noise):
        write_profile(tmp_path, "snowy_peaks", GOOD)
        registry = load_biomes(tmp_path, voxel_types, noise)
        profile = registry.get_biome_by_name("snowy_peaks")
        assert isinstance(profile, BiomeProfile)
        assert profile.name == "snowy_peaks"

    def test_missing_name_returns_none(self, tmp_path, voxel_types, noise):
        write_profile(tmp_path, "plains", GOOD)
        registry = load_biomes(tmp_path, voxel_types, noise)
        assert registry.get_biome_by_name("ocean") is None
        assert registry.get_biome_by_name("plains.json") is None
        assert len(registry) == 1

    def test_ignores_other_files(self, tmp_path, voxel_types, noise):
        write_profile(tmp_path, "plains", GOOD)
        (tmp_path / "README.txt").write_text("not a profile")
        registry = load_biomes(tmp_path, voxel_types, noise)
        assert registry.names() == ["plains"]

    def test_empty_directory(self, tmp_path, voxel_types, noise):
        registry = load_biomes(tmp_path, voxel_types, noise)
        assert len(registry) == 0

    def test_missing_directory(self, tmp_path, voxel_types, noise):
        with pytest.raises(FileNotFoundError):
            load_biomes(tmp_path / "nope", voxel_types, noise)

    def test_one_failure_does_not_stop_loading(self, tmp_path, voxel_types, noise, caplog):
        write_profile(tmp_path, "plains", GOOD)
        write_profile(tmp_path, "broken", "{ not json")
        write_profile(tmp_path, "typo", dict(GOOD, **{"Voxel Density": "Add(Wett, 1)"}))

        with caplog.at_level(logging.ERROR, logger="biomes.registry"):
            registry = load_biomes(tmp_path, voxel_types, noise)

        assert registry.names() == ["plains"]
        assert sorted(registry.failures) == ["broken.json", "typo.json"]
        assert isinstance(registry.failures["broken.json"], MalformedConfigError)

        typo = registry.failures["typo.json"]
        assert isinstance(typo, UnresolvedSymbolError)
        assert typo.file == "typo.json"
        assert typo.field == "Voxel Density"
        assert typo.formula == "Wett"
        assert "typo" in caplog.text
        assert "broken" in caplog.text

    def test_strict_reports_all_failures(self, tmp_path, voxel_types, noise):
        write_profile(tmp_path, "plains", GOOD)
        write_profile(tmp_path, "broken", "{ not json")
        write_profile(tmp_path, "typo", dict(GOOD, **{"Voxel Shape": "ROUND"}))

        with pytest.raises(BiomeLoadError) as exc_info:
            load_biomes(tmp_path, voxel_types, noise, strict=True)

        assert sorted(exc_info.value.failures) == ["broken.json", "typo.json"]
        message = str(exc_info.value)
        assert "2 biome profile(s) failed" in message
        assert "file=typo.json" in message
        assert "field=Voxel Shape" in message

    def test_invalid_utf8_is_recorded_as_failure(self, tmp_path, voxel_types, noise):
        write_profile(tmp_path, "plains", GOOD)
        (tmp_path / "bad.json").write_bytes(b'{"Samplers": [], "Voxel Density": "\xff\xfe"}')

        registry = load_biomes(tmp_path, voxel_types, noise)

        assert registry.names() == ["plains"]
        bad = registry.failures["bad.json"]
        assert isinstance(bad, MalformedConfigError)
        assert bad.file == "bad.json"
        assert "UTF-8" in str(bad)

    def test_deeply_nested_formula_is_recorded_as_failure(self, tmp_path, voxel_types, noise):
        write_profile(tmp_path, "plains", GOOD)
        write_profile(tmp_path, "deep", dict(GOOD, **{"Voxel Density": DEEP_FORMULA}))

        registry = load_biomes(tmp_path, voxel_types, noise)

        assert registry.names() == ["plains"]
        deep = registry.failures["deep.json"]
        assert isinstance(deep, FormulaSyntaxError)
        assert deep.file == "deep.json"
        assert deep.field == "Voxel Density"
        assert "nested too deeply" in str(deep)
        assert len(deep.formula) < 100

    def test_deeply_nested_sampler_is_recorded_as_failure(self, tmp_path, voxel_types, noise):
        samplers = [{"Name": "Deep", "Type": "Formula", "Formula": DEEP_FORMULA}]
        write_profile(tmp_path, "deep", dict(GOOD, Samplers=samplers))

        registry = load_biomes(tmp_path, voxel_types, noise)

        assert len(registry) == 0
        deep = registry.failures["deep.json"]
        assert isinstance(deep, FormulaSyntaxError)
        assert deep.file == "deep.json"
        assert deep.field == "Deep"

    def test_strict_reports_deep_nesting(self, tmp_path, voxel_types, noise):
        voxel_type = "If(Less(0,1)," * 2000 + "Voxel(Stone)" + ",Voxel(Air))" * 2000
        write_profile(tmp_path, "deep", dict(GOOD, **{"Voxel Type": voxel_type}))

        with pytest.raises(BiomeLoadError) as exc_info:
            load_biomes(tmp_path, voxel_types, noise, strict=True)

        assert list(exc_info.value.failures) == ["deep.json"]
        assert "field=Voxel Type" in str(exc_info.value)


class TestBiomeRegistry:
    def test_iterates_sorted_names(self):
        registry = BiomeRegistry({"b": object(), "a": object()})
        assert list(registry) == ["a", "b"]

    def test_copies_input_mapping(self):
        profiles = {"a": object()}
        registry = BiomeRegistry(profiles)
        profiles["b"] = object()
        assert "b" not in registry


class TestLazyBiomeRegistry:
    def test_not_loaded_until_used(self):
        calls = []
        lazy = LazyBiomeRegistry(lambda: calls.append(1) or BiomeRegistry({}))
        assert not lazy.loaded
        assert calls == []
        lazy.get()
        assert lazy.loaded
        assert calls == [1]

    def test_loads_once(self, tmp_path, voxel_types, noise):
        write_profile(tmp_path, "plains", GOOD)
        calls = []

        def loader():
            calls.append(1)
            return load_biomes(tmp_path, voxel_types, noise)

        lazy = LazyBiomeRegistry(loader)
        first = lazy.get_biome_by_name("plains")
        second = lazy.get_biome_by_name("plains")
        assert first is second
        assert lazy.get_biome_by_name("ocean") is None
        assert len(calls) == 1

    def test_concurrent_first_access_loads_exactly_once(self):
        calls = []

        def slow_loader():
            calls.append(1)
            time.sleep(0.05)
            return BiomeRegistry({"plains": object()})

        lazy = LazyBiomeRegistry(slow_loader)
        results = []

        def worker():
            results.append(lazy.get())

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert len(results) == 16
        assert all(r is results[0] for r in results)
        assert "plains" in results[0]

    def test_failed_load_is_retried(self):
        attempts = []

        def flaky_loader():
            attempts.append(1)
            if len(attempts) == 1:
                raise FileNotFoundError("profiles not mounted yet")
            return BiomeRegistry({})

        lazy = LazyBiomeRegistry(flaky_loader)
        with pytest.raises(FileNotFoundError):
            lazy.get()
        assert not lazy.loaded
        assert len(lazy.get()) == 0
        assert len(attempts) == 2
