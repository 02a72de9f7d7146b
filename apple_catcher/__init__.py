"""
Apple Catcher Package
=====================

Core simulation, session handling and Gymnasium wrapper for Apple Catcher,
a small arcade game: apples fall from the top of the play area, the player
clicks them for points, and every apple that crosses the bottom costs a life.

- catcher_core: tick simulation, rules, scoring, storage, scheduling
- game_config.yaml: all tunable parameters
"""
