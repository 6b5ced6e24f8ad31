"""
Tests for NoiseSampler and ClimateField.
"""

from biomes.climate import ClimateField
from biomes.context import SampleContext
from biomes.noise import NoiseSampler


class TestNoiseSampler:
    def setup_method(self):
        """Set up test fixtures before each test method."""
        self.sampler = NoiseSampler(seed=123456)

    def test_deterministic(self):
        assert self.sampler.sample((5, 10, -3)) == self.sampler.sample((5, 10, -3))

    def test_same_seed_same_values(self):
        other = NoiseSampler(seed=123456)
        for position in [(0, 0, 0), (17, -4, 9), (1000, 64, -2000)]:
            assert self.sampler.sample(position) == other.sample(position)

    def test_range(self):
        for x in range(-5, 5):
            value = self.sampler.sample((x, x * 3, -x))
            assert isinstance(value, float)
            assert -1.0 <= value <= 1.0

    def test_samplers_compare_by_seed(self):
        assert NoiseSampler(seed=1) == NoiseSampler(seed=1)
        assert NoiseSampler(seed=1) != NoiseSampler(seed=2)


class TestClimateField:
    def setup_method(self):
        """Set up test fixtures before each test method."""
        self.climate = ClimateField(seed=42, surface_level=64)

    def test_context_at(self):
        context = self.climate.context_at((10, 60, -20))
        assert isinstance(context, SampleContext)
        assert context.position == (10, 60, -20)
        assert context.depth == 4.0
        assert context.density == 0.0

    def test_depth_negative_above_surface(self):
        assert self.climate.get_depth(70) == -6.0

    def test_signals_in_unit_range(self):
        for x, z in [(0, 0), (100, 100), (2048, -1024), (-500, 37)]:
            assert 0.0 <= self.climate.get_temperature(x, z) <= 1.0
            assert 0.0 <= self.climate.get_moisture(x, z) <= 1.0

    def test_signals_do_not_depend_on_height(self):
        low = self.climate.context_at((5, 0, 5))
        high = self.climate.context_at((5, 200, 5))
        assert low.temperature == high.temperature
        assert low.moisture == high.moisture

    def test_deterministic(self):
        other = ClimateField(seed=42, surface_level=64)
        assert self.climate.context_at((3, 4, 5)) == other.context_at((3, 4, 5))

    def test_from_config(self):
        climate = ClimateField.from_config({"climate": {"surface_level": 100}}, seed=7)
        assert climate.seed == 7
        assert climate.surface_level == 100
        assert climate.temperature_scale == 0.002
