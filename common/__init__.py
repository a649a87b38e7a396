"""
Shared building blocks for Reenact: data models, errors, signals and
time sources. Nothing in this package depends on the scene, recording
or playback layers.
"""
