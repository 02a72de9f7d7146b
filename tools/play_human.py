"""
Human Play Mode
================

Play Apple Catcher with the mouse. The window is the play area; each loop
iteration is one display frame and runs the frame scheduler once.

Controls:
    - Click an apple: catch it
    - Click / Space: start, or play again after game over
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from apple_catcher.catcher_core.config_loader import GameConfig, load_config
from apple_catcher.catcher_core.scheduler import FrameScheduler
from apple_catcher.catcher_core.session import SessionController, SessionState
from apple_catcher.catcher_core.storage import KeyValueStore, open_default_store


def configure_logging(verbose: bool = False) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


class AppleRenderer:
    """
    Plain-shape renderer: apples are circles, the HUD is one line of text.
    """

    def __init__(self, config: GameConfig, window_width: int, window_height: int):
        self._config = config
        self._window_width = window_width
        self._window_height = window_height

        self._bg = (214, 236, 246)
        self._apple = (244, 67, 54)
        self._stem = (121, 85, 72)
        self._text = (60, 60, 60)

        pygame.font.init()
        self._font = pygame.font.Font(None, 30)

    def apple_rect(self, apple: dict) -> "pygame.Rect":
        """Screen rectangle covered by an apple (its click target)."""
        size = self._config.apple.size
        left = int(apple["x"] / 100.0 * self._window_width)
        top = int(apple["y"] / 100.0 * self._window_height)
        return pygame.Rect(left, top, size, size)

    def render(self, screen: "pygame.Surface", render_data: dict) -> None:
        """Render the complete scene."""
        screen.fill(self._bg)

        for apple in render_data["apples"]:
            rect = self.apple_rect(apple)
            pygame.draw.circle(screen, self._apple, rect.center, rect.width // 2)
            pygame.draw.line(
                screen, self._stem,
                (rect.centerx, rect.top), (rect.centerx + 4, rect.top - 8), 3
            )

        hud = f"Score: {render_data['score']}   Lives: {render_data['lives']}   Best: {render_data['high_score']}"
        screen.blit(self._font.render(hud, True, self._text), (12, 10))

        state = render_data["state"]
        if state != SessionState.ACTIVE.value:
            if state == SessionState.ENDED.value:
                status = f"Game over - score {render_data['score']}. Click or Space to play again"
            else:
                status = "Click or Space to start"
            label = self._font.render(status, True, self._text)
            screen.blit(label, label.get_rect(center=(self._window_width // 2, self._window_height // 2)))


class HumanPlayer:
    """
    Interactive game loop around a SessionController.
    """

    def __init__(
        self,
        config: GameConfig,
        store: KeyValueStore,
        seed: Optional[int] = None,
        window_width: int = 800,
        window_height: int = 600,
        target_fps: int = 60
    ):
        """
        Initialize human player.

        Raises:
            pygame.error: If no display can be opened.
        """
        self._config = config
        self._target_fps = target_fps

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height))
        pygame.display.set_caption("Apple Catcher")
        self._clock = pygame.time.Clock()

        self._scheduler = FrameScheduler(clock=pygame.time.get_ticks)
        self._session = SessionController(
            config=config,
            store=store,
            scheduler=self._scheduler,
            seed=seed,
            play_area_width=window_width
        )
        self._renderer = AppleRenderer(config, window_width, window_height)
        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns the last session's score."""
        print("=== Apple Catcher ===")
        print("Click apples before they fall. ESC to quit")
        print()

        while self._running:
            self._handle_events()

            before = self._session.state
            self._scheduler.run_frame()
            if before is SessionState.ACTIVE and self._session.state is SessionState.ENDED:
                print(f"\nGAME OVER - Score: {self._session.score} (best {self._session.high_score})")

            self._render()
            self._clock.tick(self._target_fps)

        pygame.quit()
        return self._session.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in (pygame.K_SPACE, pygame.K_RETURN):
                    self._start()

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if self._session.is_active:
                    self._click(event.pos)
                else:
                    self._start()

    def _start(self) -> None:
        if self._session.start():
            print("\n=== Game Started ===\n")

    def _click(self, pos: Tuple[int, int]) -> None:
        """Dismiss the apple under the cursor, if any."""
        render_data = self._session.get_render_data()
        # Last drawn is on top
        for apple in reversed(render_data["apples"]):
            if self._renderer.apple_rect(apple).collidepoint(pos):
                self._session.dismiss(apple["id"])
                return

    def _render(self) -> None:
        """Render the game."""
        self._renderer.render(self._screen, self._session.get_render_data())
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Apple Catcher interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=800, help="Window width (default: 800)")
    parser.add_argument("--height", type=int, default=600, help="Window height (default: 600)")
    parser.add_argument("--fps", type=int, default=None, help="Target FPS (default: from config)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--verbose", action="store_true", help="Log every tick event")

    args = parser.parse_args()
    configure_logging(args.verbose)

    if not PYGAME_AVAILABLE:
        print("Error: pygame is required for human play")
        return 1

    config = load_config(args.config)
    try:
        player = HumanPlayer(
            config=config,
            store=open_default_store(config),
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
            target_fps=args.fps or config.loop.target_fps
        )
    except pygame.error as e:
        print(f"Error: could not open a display: {e}")
        return 1

    score = player.run()
    print(f"\nFinal Score: {score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
