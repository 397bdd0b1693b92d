"""World simulation, GJK/EPA collision, isometric cameras, combatants, wave rules and an achievements client for an arena game."""

__version__ = "1.0.1"