# simulation/__init__.py
"""Simulation modules for Terraflow.

- atmosphere: precipitation, evaporation, humidity redistribution
- surface: neighbour analysis and overflow redistribution
- erosion: bedrock stripped by overflowing water
- vulcanism: slow uplift around volcanoes
- scheduler: the epoch state machine driving the phases

Submodules are imported directly (``from simulation.surface import ...``);
this package module stays import-free so simulation.config can be loaded by
low-level helpers without pulling in the whole pipeline.
"""
