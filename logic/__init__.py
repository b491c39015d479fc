"""Game model, item placement and randomizer entry points."""
