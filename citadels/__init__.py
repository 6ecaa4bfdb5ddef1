"""
Citadels card game simulation.
Character draft, rank-ordered turns with role abilities, and end-game scoring.
"""
