"""
Tests for dismissal scoring.
"""

import pytest

from apple_catcher.catcher_core.config_loader import load_config
from apple_catcher.catcher_core.scoring import DismissHandler
from apple_catcher.catcher_core.world import FallingObject, World


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def handler(config):
    return DismissHandler(config)


@pytest.fixture
def world():
    return World(
        objects=(
            FallingObject(id=1, x=10.0, y=20.0, speed=0.2),
            FallingObject(id=2, x=40.0, y=60.0, speed=0.3),
        ),
        score=0,
        lives=2,
        last_admission=1234.0,
        next_id=3
    )


class TestDismiss:
    """Test dismissal of apples."""

    def test_removes_apple_and_scores(self, handler, world, config):
        """Dismissing a present apple removes it and adds the reward."""
        new_world = handler.dismiss(world, 1)

        assert [obj.id for obj in new_world.objects] == [2]
        assert new_world.score == config.scoring.dismiss_reward

    def test_other_state_untouched(self, handler, world):
        """Lives, timing and the other apples are not changed."""
        new_world = handler.dismiss(world, 1)

        assert new_world.lives == world.lives
        assert new_world.last_admission == world.last_admission
        assert new_world.next_id == world.next_id
        assert new_world.objects[0] == world.objects[1]

    def test_absent_apple_still_scores(self, handler, world, config):
        """A click on an apple that is already gone is a no-op but still scores."""
        new_world = handler.dismiss(world, 99)

        assert new_world.objects == world.objects
        assert new_world.lives == world.lives
        assert new_world.score == world.score + config.scoring.dismiss_reward

    def test_score_after_n_dismissals(self, handler, config):
        """N dismissals with no exits score N times the reward."""
        world = World(
            objects=tuple(FallingObject(id=i, x=0.0, y=0.0, speed=0.2) for i in range(1, 8)),
            lives=3
        )

        for object_id in range(1, 8):
            world = handler.dismiss(world, object_id)

        assert world.score == 7 * config.scoring.dismiss_reward
        assert world.object_count == 0

    def test_apply_reports_presence(self, handler, world):
        """apply() tells whether the apple was still in the World."""
        world, hit = handler.apply(world, 2)
        _, late = handler.apply(world, 2)

        assert hit.was_present
        assert not late.was_present
        assert hit.points == late.points == handler.reward

    def test_input_world_not_modified(self, handler, world):
        """The original World keeps its apples and score."""
        handler.dismiss(world, 1)

        assert world.object_count == 2
        assert world.score == 0
