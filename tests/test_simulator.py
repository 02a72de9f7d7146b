"""
Tests for the tick simulator.
"""

import math

import pytest

from apple_catcher.catcher_core.config_loader import load_config
from apple_catcher.catcher_core.simulator import TickSimulator
from apple_catcher.catcher_core.world import FallingObject, World


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def simulator(config):
    return TickSimulator(config=config, seed=42)


def make_world(*objects, lives=3, score=0, last_admission=0.0, next_id=100):
    return World(
        objects=tuple(objects),
        score=score,
        lives=lives,
        last_admission=last_admission,
        next_id=next_id
    )


class TestMovement:
    """Test apple movement and exits."""

    def test_survivors_move_by_their_speed(self, simulator):
        """Every surviving apple moves down by exactly its velocity."""
        world = make_world(
            FallingObject(id=1, x=10.0, y=20.0, speed=0.5),
            FallingObject(id=2, x=50.0, y=-10.0, speed=0.25),
        )

        new_world = simulator.advance(world, now=0.0)

        moved = {obj.id: obj for obj in new_world.objects}
        assert moved[1].y == pytest.approx(20.5)
        assert moved[2].y == pytest.approx(-9.75)
        assert moved[1].x == 10.0
        assert moved[2].speed == 0.25

    def test_exited_apples_cost_lives(self, simulator):
        """Lives drop by exactly the number of apples past the threshold."""
        world = make_world(
            FallingObject(id=1, x=10.0, y=99.9, speed=0.5),
            FallingObject(id=2, x=20.0, y=99.8, speed=1.0),
            FallingObject(id=3, x=30.0, y=50.0, speed=0.5),
            lives=3
        )

        result = simulator.step(world, now=0.0)

        assert result.world.lives == 1
        assert result.lives_lost == 2
        assert {obj.id for obj in result.exited} == {1, 2}
        assert [obj.id for obj in result.world.objects] == [3]

    def test_apple_on_threshold_survives(self, simulator):
        """An apple exactly on the threshold is still in play."""
        world = make_world(FallingObject(id=1, x=10.0, y=99.5, speed=0.5))

        new_world = simulator.advance(world, now=0.0)

        assert new_world.lives == 3
        assert new_world.objects[0].y == 100.0

    def test_lives_floor_at_zero(self, simulator):
        """More exits than lives never makes lives negative."""
        world = make_world(
            FallingObject(id=1, x=0.0, y=100.0, speed=1.0),
            FallingObject(id=2, x=0.0, y=100.0, speed=1.0),
            FallingObject(id=3, x=0.0, y=100.0, speed=1.0),
            lives=1
        )

        result = simulator.step(world, now=0.0)

        assert result.world.lives == 0
        assert result.lives_lost == 1
        assert len(result.exited) == 3

    def test_score_untouched(self, simulator):
        """Ticks never change the score."""
        world = make_world(
            FallingObject(id=1, x=0.0, y=99.9, speed=1.0),
            score=70
        )

        new_world = simulator.advance(world, now=5000.0)

        assert new_world.score == 70

    def test_input_world_not_modified(self, simulator):
        """advance returns a new World and leaves its input alone."""
        world = make_world(FallingObject(id=1, x=10.0, y=20.0, speed=0.5))
        before = make_world(FallingObject(id=1, x=10.0, y=20.0, speed=0.5))

        simulator.advance(world, now=5000.0)

        assert world == before


class TestAdmission:
    """Test new apple admission."""

    def test_no_admission_at_exact_interval(self, simulator, config):
        """Elapsed time must exceed the interval, not just reach it."""
        world = make_world(last_admission=0.0)

        result = simulator.step(world, now=config.spawn.interval_ms)

        assert result.admitted is None
        assert result.world.object_count == 0
        assert result.world.last_admission == 0.0

    def test_admission_after_interval(self, simulator, config):
        """One apple is admitted once the interval has passed."""
        world = make_world(last_admission=0.0, next_id=7)

        result = simulator.step(world, now=config.spawn.interval_ms + 1)

        assert result.admitted is not None
        assert result.admitted.id == 7
        assert result.admitted.y == config.board.spawn_y
        assert result.world.next_id == 8
        assert result.world.last_admission == config.spawn.interval_ms + 1
        assert result.world.objects[-1] == result.admitted

    def test_at_most_one_admission_per_tick(self, simulator):
        """A long gap still admits a single apple."""
        world = make_world(last_admission=0.0)

        result = simulator.step(world, now=60000.0)

        assert result.world.object_count == 1

    def test_spawn_interval_scenario(self, simulator):
        """Ticks at +500 and +1000 admit nothing; a tick at +1600 admits one."""
        world = make_world(last_admission=0.0)

        world = simulator.advance(world, now=500.0)
        assert world.object_count == 0

        world = simulator.advance(world, now=1000.0)
        assert world.object_count == 0

        world = simulator.advance(world, now=1600.0)
        assert world.object_count == 1
        assert world.last_admission == 1600.0

    def test_new_apple_moves_from_next_tick(self, simulator, config):
        """The admitted apple starts at spawn_y and moves on the following tick."""
        world = simulator.advance(make_world(last_admission=0.0), now=1001.0)
        apple = world.objects[0]

        world = simulator.advance(world, now=1002.0)

        assert world.objects[0].y == pytest.approx(config.board.spawn_y + apple.speed)

    def test_speed_range(self, simulator, config):
        """Speed is base plus jitter in [0, jitter) at score zero."""
        world = make_world(last_admission=0.0)
        now = 0.0
        for _ in range(50):
            now += config.spawn.interval_ms + 1
            result = simulator.step(world, now=now)
            speed = result.admitted.speed
            assert config.spawn.base_speed <= speed < config.spawn.base_speed + config.spawn.speed_jitter
            world = result.world

    def test_speed_grows_with_score(self, simulator, config):
        """Higher scores produce faster apples."""
        world = make_world(last_admission=0.0, score=500)

        result = simulator.step(world, now=1001.0)

        assert result.admitted.speed >= config.spawn.base_speed + 500 / config.spawn.score_speed_divisor

    def test_x_keeps_apple_inside(self, simulator, config):
        """X leaves room for the apple's full width."""
        width = 400
        max_x = 100 - config.apple.size / width * 100
        world = make_world(last_admission=0.0)
        now = 0.0
        for _ in range(100):
            now += 1001
            result = simulator.step(world, now=now, play_area_width=width)
            assert 0.0 <= result.admitted.x <= max_x
            world = result.world

    @pytest.mark.parametrize("width", [None, 0, -20, float("nan"), float("inf"), 10**400])
    def test_unusable_width_falls_back(self, simulator, config, width):
        """Missing or invalid widths use the configured fallback width."""
        max_x = 100 - config.apple.size / config.board.fallback_width * 100
        world = make_world(last_admission=0.0)

        result = simulator.step(world, now=1001.0, play_area_width=width)

        assert result.admitted is not None
        assert 0.0 <= result.admitted.x <= max_x

    def test_narrow_area_pins_to_left(self, simulator, config):
        """A play area narrower than one apple spawns at x = 0."""
        world = make_world(last_admission=0.0)

        result = simulator.step(world, now=1001.0, play_area_width=config.apple.size / 2)

        assert result.admitted.x == 0.0

    def test_non_finite_timestamp_never_admits(self, simulator):
        """A NaN timestamp degrades to no admission rather than an error."""
        world = make_world(last_admission=0.0)

        result = simulator.step(world, now=math.nan)

        assert result.admitted is None
        assert result.world.last_admission == 0.0

    def test_deterministic_with_seed(self, config):
        """Same seed and timestamps give the same worlds."""
        sim1 = TickSimulator(config=config, seed=7)
        sim2 = TickSimulator(config=config, seed=7)
        w1 = w2 = make_world(last_admission=0.0)

        now = 0.0
        for _ in range(200):
            now += 250.0
            w1 = sim1.advance(w1, now, play_area_width=640)
            w2 = sim2.advance(w2, now, play_area_width=640)

        assert w1 == w2
        assert w1.object_count > 0
